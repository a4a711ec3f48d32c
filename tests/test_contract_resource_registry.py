import unittest

from shopboard.model import Order
from shopboard.resources import DEFAULT_RESOURCES, ResourceRegistry

BASE = 1577836800000
H = 60 * 60000


def _order(oid: str, resource: str, start: int, due: int, status: str = "active") -> Order:
    return Order(
        id=oid,
        customer_name=oid,
        order_details="",
        resource=resource,
        start_time=start,
        due_time=due,
        duration=(due - start) / H,
        status=status,
    )


class TestResourceRegistryContract(unittest.TestCase):
    def test_defaults(self) -> None:
        self.assertEqual(ResourceRegistry().names(), list(DEFAULT_RESOURCES))
        self.assertEqual(ResourceRegistry([]).names(), [])

    def test_add_rejects_empty_and_duplicates(self) -> None:
        r = ResourceRegistry([])
        self.assertTrue(r.add("Lathe"))
        self.assertFalse(r.add("Lathe"))
        self.assertFalse(r.add("  "))
        self.assertTrue(r.add("lathe"))
        self.assertTrue(r.add("  Mill "))
        self.assertEqual(r.names(), ["Lathe", "lathe", "Mill"])

    def test_replace_all_dedupes(self) -> None:
        r = ResourceRegistry(["A", "B", "A", "", "C"])
        self.assertEqual(r.names(), ["A", "B", "C"])

    def test_remove(self) -> None:
        r = ResourceRegistry(["A", "B"])
        self.assertTrue(r.remove("A"))
        self.assertFalse(r.remove("A"))
        self.assertNotIn("A", r)
        self.assertEqual(len(r), 1)

    def test_busy_status(self) -> None:
        r = ResourceRegistry(["A", "B", "C"])
        now = BASE + 10 * H
        orders = [
            _order("1", "A", BASE + 9 * H, BASE + 11 * H),
            # due == now: not busy (half-open interval)
            _order("2", "B", BASE + 8 * H, now),
            # completed orders never count
            _order("3", "C", BASE + 9 * H, BASE + 11 * H, status="completed"),
            # removed resource is ignored
            _order("4", "Gone", BASE + 9 * H, BASE + 11 * H),
        ]
        self.assertEqual(r.busy_status(now, orders), {"A": True, "B": False, "C": False})
        self.assertEqual(r.busy_status(BASE + 9 * H, orders)["B"], True)


if __name__ == "__main__":
    unittest.main(verbosity=2)
