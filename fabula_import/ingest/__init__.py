"""Page tokenizing, grammars and the import driver."""
