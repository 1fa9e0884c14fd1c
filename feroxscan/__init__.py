"""Building blocks for recursive web content discovery: responses, filters, link extraction, heuristics and scan helpers."""

__version__ = "0.1.0"