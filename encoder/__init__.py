"""
encoder — Dictionary and bit-vector codec.

Maps the 12-dot board to BIP-39 word numbers and back, and resolves typed
text (exact word or unique prefix) to a dot pattern.
"""
