"""Command line entry point: run the map server, inspect the dataset."""
