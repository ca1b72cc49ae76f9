"""Todo and category records, factories and pure validation rules."""
