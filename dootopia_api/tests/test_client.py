import unittest
from unittest.mock import MagicMock

from dootopia_api import cache as cache_slots
from dootopia_api.cache import DataCache
from dootopia_api.client import ApiError, DooTopiaClient


def _response(status_code=200, payload=None, reason="OK"):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.reason = reason
    if payload is None:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = payload
    return response


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class DooTopiaClientTests(unittest.TestCase):
    def setUp(self):
        self.session = MagicMock()
        self.clock = FakeClock()
        self.client = DooTopiaClient(
            "http://api.test/", session=self.session, cache=DataCache(clock=self.clock)
        )

    def test_error_body_becomes_api_error(self):
        self.session.request.return_value = _response(
            403, {"error": "Avatar not owned by user"}, reason="Forbidden"
        )
        with self.assertRaises(ApiError) as ctx:
            self.client.select_avatar("u1", "p1")
        self.assertEqual(ctx.exception.status_code, 403)
        self.assertEqual(ctx.exception.message, "Avatar not owned by user")
        method, url = self.session.request.call_args.args
        self.assertEqual((method, url), ("PUT", "http://api.test/users/u1/avatar"))

    def test_not_found_listing_is_empty(self):
        self.session.request.return_value = _response(404, {"error": "No rewards found"})
        self.assertEqual(self.client.list_rewards("u1"), [])

    def test_server_error_without_json(self):
        self.session.request.return_value = _response(502, None, reason="Bad Gateway")
        with self.assertRaises(ApiError) as ctx:
            self.client.list_users()
        self.assertEqual(ctx.exception.message, "Bad Gateway")

    def test_tasks_are_cached_until_a_write(self):
        self.session.request.return_value = _response(200, [{"_id": "t1"}])
        self.assertEqual(self.client.list_tasks("u1"), [{"_id": "t1"}])
        self.assertEqual(self.client.list_tasks("u1"), [{"_id": "t1"}])
        self.assertEqual(self.session.request.call_count, 1)

        # A different user is a cache miss.
        self.client.list_tasks("u2")
        self.assertEqual(self.session.request.call_count, 2)

        self.session.request.return_value = _response(201, {"_id": "t2"})
        self.client.create_task({"title": "new"})
        self.assertFalse(self.client.cache.is_cached(cache_slots.TASKS))

        self.session.request.return_value = _response(200, [{"_id": "t1"}, {"_id": "t2"}])
        self.assertEqual(len(self.client.list_tasks("u2")), 2)

    def test_force_refresh_skips_cache(self):
        self.session.request.return_value = _response(200, [{"_id": "l1"}])
        self.client.list_lists("u1")
        self.client.list_lists("u1", force_refresh=True)
        self.assertEqual(self.session.request.call_count, 2)

    def test_profile_cache_expires(self):
        self.session.request.return_value = _response(200, {"_id": "u1", "points": 3})
        self.client.get_user_by_firebase_id("fb-1")
        self.client.get_user_by_firebase_id("fb-1")
        self.assertEqual(self.session.request.call_count, 1)

        self.clock.now += 121
        self.client.get_user_by_firebase_id("fb-1")
        self.assertEqual(self.session.request.call_count, 2)

    def test_purchase_invalidates_profile(self):
        self.session.request.return_value = _response(200, {"_id": "u1"})
        self.client.get_user_by_firebase_id("fb-1")
        self.session.request.return_value = _response(
            200, {"message": "ok", "points": 0, "inventory": ["p1"]}
        )
        self.client.purchase_prize("p1", "u1")
        self.assertFalse(self.client.cache.is_cached(cache_slots.USER_PROFILE))
        self.assertEqual(
            self.session.request.call_args.kwargs["json"], {"userId": "u1"}
        )

    def test_health(self):
        self.session.request.return_value = _response(
            200, {"message": "DooTopia API running"}
        )
        self.assertEqual(self.client.health(), {"message": "DooTopia API running"})
        self.assertEqual(
            self.session.request.call_args.args, ("GET", "http://api.test/")
        )

    def test_single_document_reads(self):
        calls = [
            (self.client.get_subtask, "s1", "http://api.test/subtasks/s1"),
            (self.client.get_list, "l1", "http://api.test/lists/l1"),
            (self.client.get_reward, "r1", "http://api.test/rewards/r1"),
        ]
        for method, doc_id, url in calls:
            with self.subTest(url=url):
                self.session.request.return_value = _response(200, {"_id": doc_id})
                self.assertEqual(method(doc_id), {"_id": doc_id})
                self.assertEqual(self.session.request.call_args.args, ("GET", url))

    def test_single_document_read_not_found_raises(self):
        self.session.request.return_value = _response(404, {"error": "List not found"})
        with self.assertRaises(ApiError) as ctx:
            self.client.get_list("missing")
        self.assertEqual(ctx.exception.message, "List not found")

    def test_add_points_sends_increment(self):
        self.session.request.return_value = _response(200, {"message": "ok"})
        self.client.add_points("u1", 5)
        self.assertEqual(
            self.session.request.call_args.kwargs["json"], {"$inc": {"points": 5}}
        )


class DataCacheTests(unittest.TestCase):
    def test_invalidate_single_and_all(self):
        cache = DataCache()
        cache.set(cache_slots.TASKS, {"a": 1})
        cache.set(cache_slots.LISTS, [])
        cache.invalidate(cache_slots.TASKS)
        self.assertFalse(cache.is_cached(cache_slots.TASKS))
        self.assertTrue(cache.is_cached(cache_slots.LISTS))
        cache.invalidate("all")
        self.assertFalse(cache.is_cached(cache_slots.LISTS))

    def test_none_is_not_cached(self):
        cache = DataCache()
        cache.set(cache_slots.PRIZES, None)
        self.assertFalse(cache.is_cached(cache_slots.PRIZES))
        self.assertIsNone(cache.get(cache_slots.PRIZES))


if __name__ == "__main__":
    unittest.main()
