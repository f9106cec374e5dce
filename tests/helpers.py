PASSWORD = "Passw0rd!"


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def count(storage, cls) -> int:
    return storage.get_session().query(cls).count()
