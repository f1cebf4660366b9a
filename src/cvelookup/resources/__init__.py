"""Static resources bundled with cvelookup."""
