"""Core retrieval pipeline: extraction, chunking, embedding, storage, answering."""
