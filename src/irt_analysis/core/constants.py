# Response code for a missing (not administered / omitted) answer
MISSING_VALUE = -1

# Tokens treated as missing when reading a response table
MISSING_TOKENS = ("NA", ".")
