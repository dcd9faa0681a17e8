# Left over from an old migration; does not parse.
def broken(:
    pass
