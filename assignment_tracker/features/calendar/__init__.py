"""Calendar month view and Google Calendar sync."""
