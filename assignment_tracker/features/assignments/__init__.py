"""Assignment CRUD, upcoming list, stats and CSV export."""
