"""Core logic: storage, front-matter parsing, constraint evaluation and knowledge base registry."""
