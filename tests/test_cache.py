from directadmin.cache import CacheCategory, ObjectCache


def test_get_fetches_once_per_category():
    cache = ObjectCache()
    fetches = []

    def fetch():
        fetches.append(1)
        return {"bandwidth": "100"}

    assert cache.get(CacheCategory.CONFIG, fetch) == {"bandwidth": "100"}
    assert cache.get(CacheCategory.CONFIG, fetch) == {"bandwidth": "100"}
    assert len(fetches) == 1


def test_get_item_returns_none_for_missing_key():
    cache = ObjectCache()

    assert cache.get_item(CacheCategory.USAGE, "ftp", lambda: {"quota": "1"}) is None
    assert cache.get_item(CacheCategory.USAGE, "quota", lambda: {"quota": "2"}) == "1"


def test_get_item_on_list_category_is_none():
    cache = ObjectCache()

    assert cache.get_item(CacheCategory.IPS, "1.2.3.4", lambda: ["1.2.3.4"]) is None


def test_clear_drops_every_category():
    cache = ObjectCache()
    cache.set(CacheCategory.CONFIG, {"a": "1"})
    cache.set(CacheCategory.DOMAINS, {})

    cache.clear()

    assert not cache.contains(CacheCategory.CONFIG)
    assert not cache.contains(CacheCategory.DOMAINS)
    assert cache.get(CacheCategory.CONFIG, lambda: {"a": "2"}) == {"a": "2"}
