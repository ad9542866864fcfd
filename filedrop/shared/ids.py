import secrets

# 16 bytes -> 22 url-safe chars, 128 bits of entropy
ID_BYTES = 16

def generate_id() -> str:
    return secrets.token_urlsafe(ID_BYTES)
