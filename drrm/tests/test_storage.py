import unittest

from sqlalchemy import insert, select
from sqlalchemy.exc import IntegrityError

from drrm import schemas, seed_data
from drrm.db import DbConfig, create_db_handle
from drrm.storage import DbStorage


class DbStorageTests(unittest.TestCase):
    """
    Runs the storage adapter against the embedded backend on an in-memory
    SQLite database, so every boolean and coordinate list goes through the
    embedded row coercion.
    """

    def setUp(self):
        self.storage = DbStorage(create_db_handle(DbConfig(sqlite_path=":memory:")))

    def tearDown(self):
        self.storage.close()

    def test_go_bag_checklist_scenario(self):
        created = self.storage.create_go_bag_item(
            schemas.InsertGoBagItem(
                category="Essentials", name="Water (1 gallon/person)", checked=False
            )
        )
        updated = self.storage.update_go_bag_item(created.id, True)
        self.assertIsNotNone(updated)
        self.assertIs(updated.checked, True)

        items = [
            item
            for item in self.storage.get_go_bag_items()
            if item.name == "Water (1 gallon/person)"
        ]
        self.assertEqual(len(items), 1)
        self.assertIs(items[0].checked, True)

    def test_go_bag_toggle_restores_state(self):
        self.storage.initialize_go_bag_items()
        before = self.storage.get_go_bag_items()
        item_id = before[0].id

        self.storage.update_go_bag_item(item_id, True)
        self.storage.update_go_bag_item(item_id, False)
        self.assertEqual(self.storage.get_go_bag_items(), before)

    def test_checked_flag_stored_as_integer(self):
        item = self.storage.create_go_bag_item(
            schemas.InsertGoBagItem(category="Clothing", name="Poncho", checked=True)
        )
        table = self.storage.tables.go_bag_items
        with self.storage.handle.Session() as session:
            raw = session.execute(
                select(table.c.checked).where(table.c.id == item.id)
            ).scalar_one()
        self.assertEqual(raw, 1)
        self.assertIs(item.checked, True)

    def test_update_missing_rows_return_none(self):
        self.assertIsNone(self.storage.update_evacuation_center(999, "Closed"))
        self.assertIsNone(self.storage.update_go_bag_item(999, True))
        self.assertIsNone(self.storage.update_member_status(999, "safe"))

    def test_evacuation_center_status_update(self):
        self.storage.initialize_evacuation_centers()
        center = self.storage.get_evacuation_centers()[0]
        updated = self.storage.update_evacuation_center(center.id, "Full")
        self.assertEqual(updated.status, "Full")
        self.assertEqual(updated.name, center.name)

    def test_initializers_are_idempotent(self):
        first = self.storage.initialize_reference_data()
        self.assertEqual(first["go_bag_items"], len(seed_data.GO_BAG_ITEMS))
        self.assertEqual(first["members"], len(seed_data.MEMBERS))
        counts = {
            "go_bag_items": len(self.storage.get_go_bag_items()),
            "evacuation_centers": len(self.storage.get_evacuation_centers()),
            "households": len(self.storage.get_households()),
            "hazard_zones": len(self.storage.get_hazard_zones()),
            "pois": len(self.storage.get_pois()),
        }

        second = self.storage.initialize_reference_data()
        self.assertEqual(set(second.values()), {0})
        self.assertEqual(len(self.storage.get_go_bag_items()), counts["go_bag_items"])
        self.assertEqual(
            len(self.storage.get_evacuation_centers()), counts["evacuation_centers"]
        )
        self.assertEqual(len(self.storage.get_households()), counts["households"])
        self.assertEqual(len(self.storage.get_hazard_zones()), counts["hazard_zones"])
        self.assertEqual(len(self.storage.get_pois()), counts["pois"])

    def test_partially_seeded_table_counts_as_seeded(self):
        self.storage.create_poi(
            schemas.InsertPoi(
                name="Private Clinic", type="medical", latitude="13.1", longitude="123.4"
            )
        )
        self.assertEqual(self.storage.initialize_pois(), 0)
        self.assertEqual(len(self.storage.get_pois()), 1)

    def test_members_seeded_into_first_household(self):
        self.assertEqual(self.storage.initialize_members(), 0)
        self.storage.initialize_households()
        self.storage.initialize_members()
        household = self.storage.get_households()[0]
        members = self.storage.get_members(household.id)
        self.assertEqual(
            [member.name for member in members],
            [member["name"] for member in seed_data.MEMBERS],
        )
        self.assertTrue(all(member.status == "unknown" for member in members))

    def test_hazard_zone_coordinates_roundtrip(self):
        self.storage.initialize_hazard_zones()
        zones = self.storage.get_hazard_zones()
        self.assertEqual(len(zones), len(seed_data.HAZARD_ZONES))
        self.assertEqual(zones[0].coordinates, seed_data.HAZARD_ZONES[0].coordinates)

    def test_malformed_coordinates_read_back_empty(self):
        table = self.storage.tables.hazard_zones
        with self.storage.handle.Session() as session:
            session.execute(
                insert(table).values(
                    name="Corrupt Zone",
                    type="flood",
                    coordinates="[13.03,123.45",
                    severity="low",
                )
            )
            session.commit()

        zones = self.storage.get_hazard_zones()
        self.assertEqual(len(zones), 1)
        self.assertEqual(zones[0].name, "Corrupt Zone")
        self.assertEqual(zones[0].coordinates, [])

    def test_incidents_roundtrip_in_report_order(self):
        first = self.storage.create_incident(
            schemas.InsertIncident(
                type="flood",
                description="Water rising near the bridge",
                location="Barangay 1",
                latitude="13.0281",
                longitude="123.4441",
                is_anonymous=True,
            )
        )
        second = self.storage.create_incident(
            schemas.InsertIncident(
                type="fire", description="Grass fire", location="Barangay 2"
            )
        )
        incidents = self.storage.get_incidents()
        self.assertEqual([incident.id for incident in incidents], [first.id, second.id])
        self.assertEqual(incidents[0], first)
        self.assertIs(incidents[0].is_anonymous, True)
        self.assertIs(incidents[1].is_anonymous, False)
        self.assertIsNone(incidents[1].latitude)
        self.assertLessEqual(incidents[0].reported_at, incidents[1].reported_at)

    def test_users(self):
        user = self.storage.create_user(
            schemas.InsertUser(username="mdrrmo", password="hashed")
        )
        self.assertTrue(user.id)
        self.assertEqual(self.storage.get_user(user.id), user)
        self.assertEqual(self.storage.get_user_by_username("mdrrmo"), user)
        self.assertIsNone(self.storage.get_user("missing"))
        self.assertIsNone(self.storage.get_user_by_username("nobody"))

        with self.assertRaises(IntegrityError):
            self.storage.create_user(
                schemas.InsertUser(username="mdrrmo", password="other")
            )

    def test_household_members_and_check_ins(self):
        household = self.storage.create_household(
            schemas.InsertHousehold(name="Santos Family", address="Purok 3")
        )
        self.assertEqual(self.storage.get_households(), [household])

        member = self.storage.create_member(
            schemas.InsertMember(household_id=household.id, name="Ana Santos")
        )
        other = self.storage.create_household(schemas.InsertHousehold(name="Cruz"))
        self.storage.create_member(
            schemas.InsertMember(household_id=other.id, name="Ben Cruz")
        )
        self.assertEqual(self.storage.get_members(household.id), [member])

        updated = self.storage.update_member_status(member.id, "safe", "Gymnasium")
        self.assertEqual(updated.status, "safe")
        self.assertEqual(updated.last_known_location, "Gymnasium")

        # Location is kept when the update carries none.
        updated = self.storage.update_member_status(member.id, "needs-help")
        self.assertEqual(updated.status, "needs-help")
        self.assertEqual(updated.last_known_location, "Gymnasium")

        check_in = self.storage.create_check_in(
            schemas.InsertCheckIn(member_id=member.id, location="Gymnasium")
        )
        self.assertIs(check_in.is_safe, True)
        unsafe = self.storage.create_check_in(
            schemas.InsertCheckIn(member_id=member.id, is_safe=False)
        )
        self.assertEqual(self.storage.get_check_ins(member.id), [check_in, unsafe])
        self.assertEqual(self.storage.get_check_ins(member.id + 100), [])

    def test_pois_filtered_by_type(self):
        self.storage.initialize_pois()
        self.assertEqual(len(self.storage.get_pois()), len(seed_data.POIS))
        medical = self.storage.get_pois("medical")
        self.assertEqual([poi.name for poi in medical], ["Pio Duran Health Center"])
        self.assertIs(medical[0].available, True)
        self.assertEqual(self.storage.get_pois("heliport"), [])

    def test_evacuation_center_roundtrip(self):
        center = self.storage.create_evacuation_center(
            schemas.InsertEvacuationCenter(
                name="Chapel", distance="3 km", capacity="80 pax", latitude=13.04
            )
        )
        self.assertEqual(center.status, "Open")
        self.assertEqual(center.latitude, "13.04")
        self.assertEqual(self.storage.get_evacuation_centers(), [center])


if __name__ == "__main__":
    unittest.main()
