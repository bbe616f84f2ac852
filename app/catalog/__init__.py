"""Static reference tables: muscles, exercises, spillover graph, connective tissue."""
