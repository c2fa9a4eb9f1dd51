"""Text embedding: WordPiece vocabulary and tokenizer, mean pooling, projection and embedders."""