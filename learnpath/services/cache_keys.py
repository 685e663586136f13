# services/cache_keys.py

def active_catalog_key() -> str:
    return "catalog:active"

# Counters
def cache_hits_key() -> str:
    return "cache_stats:hits"

def cache_misses_key() -> str:
    return "cache_stats:misses"

def anomalies_key() -> str:
    return "data_quality:anomalies"

def orphaned_records_key() -> str:
    return "data_quality:orphaned_records"

# Auth/session
def blacklisted_jti_key(jti: str) -> str:
    return f"blacklisted_tokens:{jti}"
