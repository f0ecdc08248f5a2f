"""Entry point for running the reminder scheduler as a module.

Allows running with: python -m src.reminders
"""

from src.reminders.scheduler import main

if __name__ == "__main__":
    main()
