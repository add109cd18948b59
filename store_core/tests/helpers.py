# store_core/tests/helpers.py

def store_headers(store):
    """
    Selects a store explicitly. DRF test client requires HTTP_ prefix.
    """
    return {"HTTP_X_STORE_ID": str(store.id)}
