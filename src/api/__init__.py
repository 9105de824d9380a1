"""HTTP surface: the Aircall routing webhook and mapping status."""
