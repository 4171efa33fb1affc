import hashlib, json

def payload_hash(payload: dict) -> str:
    """Stable digest of an audit payload; Decimal and datetime values hash by their string form."""
    s = json.dumps(payload or {}, sort_keys=True, default=str, separators=(",", ":"))
    return hashlib.sha256(s.encode("utf-8")).hexdigest()
