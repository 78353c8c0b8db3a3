"""Domain layer - schemas, records and the rules that govern them."""
