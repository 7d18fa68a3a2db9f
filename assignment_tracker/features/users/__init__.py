"""Users; ids are passed explicitly to every service call."""
