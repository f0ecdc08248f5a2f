"""Messaging integrations used to deliver reminders."""
