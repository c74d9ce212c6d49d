"""Data types shared by the parser, resolver and config manager."""
