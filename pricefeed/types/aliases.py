# -------- Aliases (clarify intent) --------
UnixSeconds = int
Symbol = bytes  # opaque, compared byte for byte
Identity = str  # caller / owner identity, e.g. an account address
