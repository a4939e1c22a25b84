"""
Storage adapter: one method per read/write operation per entity, plus
seed-on-empty initializers for the reference tables.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Optional, Protocol, Sequence, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import Table, func, insert, select, update

from drrm import schemas, seed_data
from drrm.codecs import codec_for
from drrm.db import BackendKind, DbHandle

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


class Storage(Protocol):
    """Operations the API needs from persistence."""

    kind: BackendKind

    def get_user(self, user_id: str) -> Optional[schemas.User]:
        ...

    def get_user_by_username(self, username: str) -> Optional[schemas.User]:
        ...

    def create_user(self, user: schemas.InsertUser) -> schemas.User:
        ...

    def create_incident(self, incident: schemas.InsertIncident) -> schemas.Incident:
        ...

    def get_incidents(self) -> list[schemas.Incident]:
        ...

    def get_go_bag_items(self) -> list[schemas.GoBagItem]:
        ...

    def create_go_bag_item(self, item: schemas.InsertGoBagItem) -> schemas.GoBagItem:
        ...

    def update_go_bag_item(
        self, item_id: int, checked: bool
    ) -> Optional[schemas.GoBagItem]:
        ...

    def initialize_go_bag_items(self) -> int:
        ...

    def get_evacuation_centers(self) -> list[schemas.EvacuationCenter]:
        ...

    def create_evacuation_center(
        self, center: schemas.InsertEvacuationCenter
    ) -> schemas.EvacuationCenter:
        ...

    def update_evacuation_center(
        self, center_id: int, status: str
    ) -> Optional[schemas.EvacuationCenter]:
        ...

    def initialize_evacuation_centers(self) -> int:
        ...

    def get_households(self) -> list[schemas.Household]:
        ...

    def create_household(
        self, household: schemas.InsertHousehold
    ) -> schemas.Household:
        ...

    def initialize_households(self) -> int:
        ...

    def get_members(self, household_id: int) -> list[schemas.Member]:
        ...

    def create_member(self, member: schemas.InsertMember) -> schemas.Member:
        ...

    def update_member_status(
        self, member_id: int, status: str, location: Optional[str] = None
    ) -> Optional[schemas.Member]:
        ...

    def initialize_members(self) -> int:
        ...

    def get_check_ins(self, member_id: int) -> list[schemas.CheckIn]:
        ...

    def create_check_in(self, check_in: schemas.InsertCheckIn) -> schemas.CheckIn:
        ...

    def get_hazard_zones(self) -> list[schemas.HazardZone]:
        ...

    def create_hazard_zone(
        self, zone: schemas.InsertHazardZone
    ) -> schemas.HazardZone:
        ...

    def initialize_hazard_zones(self) -> int:
        ...

    def get_pois(self, type: Optional[str] = None) -> list[schemas.Poi]:
        ...

    def create_poi(self, poi: schemas.InsertPoi) -> schemas.Poi:
        ...

    def initialize_pois(self) -> int:
        ...

    def initialize_reference_data(self) -> dict[str, int]:
        ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class DbStorage:
    """
    SQLAlchemy-backed storage over a ``DbHandle``. Rows pass through the
    entity codec for the handle's backend kind on every write and read.
    """

    def __init__(self, handle: DbHandle):
        self.handle = handle
        self.kind = handle.kind
        self.tables = handle.tables

    def close(self) -> None:
        self.handle.dispose()

    # Query helpers

    def _insert(self, table: Table, values: dict[str, Any]) -> dict:
        codec = codec_for(table.name)
        stmt = (
            insert(table)
            .values(**codec.serialize(values, self.kind))
            .returning(*table.c)
        )
        with self.handle.Session() as session:
            row = session.execute(stmt).mappings().one()
            session.commit()
            return codec.deserialize(row, self.kind)

    def _select(self, table: Table, *criteria, order_by: Sequence = ()) -> list[dict]:
        codec = codec_for(table.name)
        stmt = select(table)
        if criteria:
            stmt = stmt.where(*criteria)
        if order_by:
            stmt = stmt.order_by(*order_by)
        with self.handle.Session() as session:
            rows = session.execute(stmt).mappings().all()
            return [codec.deserialize(row, self.kind) for row in rows]

    def _update(
        self, table: Table, row_id: Any, values: dict[str, Any]
    ) -> Optional[dict]:
        codec = codec_for(table.name)
        stmt = (
            update(table)
            .where(table.c.id == row_id)
            .values(**codec.serialize(values, self.kind))
            .returning(*table.c)
        )
        with self.handle.Session() as session:
            row = session.execute(stmt).mappings().one_or_none()
            session.commit()
            if row is None:
                return None
            return codec.deserialize(row, self.kind)

    def _count(self, table: Table) -> int:
        with self.handle.Session() as session:
            return session.execute(select(func.count()).select_from(table)).scalar_one()

    def _seed(self, table: Table, rows: Sequence[dict[str, Any]]) -> int:
        # Count-based: a partially seeded table is treated as seeded.
        if self._count(table):
            return 0
        logger.info("Seeding %d rows into %s", len(rows), table.name)
        for values in rows:
            self._insert(table, values)
        return len(rows)

    @staticmethod
    def _one(model: Type[RecordT], row: Optional[dict]) -> Optional[RecordT]:
        return model.model_validate(row) if row is not None else None

    @staticmethod
    def _many(model: Type[RecordT], rows: list[dict]) -> list[RecordT]:
        return [model.model_validate(row) for row in rows]

    # Users

    def get_user(self, user_id: str) -> Optional[schemas.User]:
        users = self.tables.users
        rows = self._select(users, users.c.id == user_id)
        return self._one(schemas.User, rows[0] if rows else None)

    def get_user_by_username(self, username: str) -> Optional[schemas.User]:
        users = self.tables.users
        rows = self._select(users, users.c.username == username)
        return self._one(schemas.User, rows[0] if rows else None)

    def create_user(self, user: schemas.InsertUser) -> schemas.User:
        row = self._insert(
            self.tables.users, {"id": str(uuid.uuid4()), **user.model_dump()}
        )
        return schemas.User.model_validate(row)

    # Incidents

    def create_incident(self, incident: schemas.InsertIncident) -> schemas.Incident:
        row = self._insert(
            self.tables.incidents, {**incident.model_dump(), "reported_at": _utcnow()}
        )
        return schemas.Incident.model_validate(row)

    def get_incidents(self) -> list[schemas.Incident]:
        incidents = self.tables.incidents
        rows = self._select(
            incidents,
            order_by=(incidents.c.reported_at.asc(), incidents.c.id.asc()),
        )
        return self._many(schemas.Incident, rows)

    # Go-bag checklist

    def get_go_bag_items(self) -> list[schemas.GoBagItem]:
        return self._many(schemas.GoBagItem, self._select(self.tables.go_bag_items))

    def create_go_bag_item(self, item: schemas.InsertGoBagItem) -> schemas.GoBagItem:
        row = self._insert(self.tables.go_bag_items, item.model_dump())
        return schemas.GoBagItem.model_validate(row)

    def update_go_bag_item(
        self, item_id: int, checked: bool
    ) -> Optional[schemas.GoBagItem]:
        row = self._update(self.tables.go_bag_items, item_id, {"checked": checked})
        return self._one(schemas.GoBagItem, row)

    def initialize_go_bag_items(self) -> int:
        return self._seed(
            self.tables.go_bag_items,
            [item.model_dump() for item in seed_data.GO_BAG_ITEMS],
        )

    # Evacuation centers

    def get_evacuation_centers(self) -> list[schemas.EvacuationCenter]:
        return self._many(
            schemas.EvacuationCenter, self._select(self.tables.evacuation_centers)
        )

    def create_evacuation_center(
        self, center: schemas.InsertEvacuationCenter
    ) -> schemas.EvacuationCenter:
        row = self._insert(self.tables.evacuation_centers, center.model_dump())
        return schemas.EvacuationCenter.model_validate(row)

    def update_evacuation_center(
        self, center_id: int, status: str
    ) -> Optional[schemas.EvacuationCenter]:
        row = self._update(
            self.tables.evacuation_centers, center_id, {"status": status}
        )
        return self._one(schemas.EvacuationCenter, row)

    def initialize_evacuation_centers(self) -> int:
        return self._seed(
            self.tables.evacuation_centers,
            [center.model_dump() for center in seed_data.EVACUATION_CENTERS],
        )

    # Households and members

    def get_households(self) -> list[schemas.Household]:
        return self._many(schemas.Household, self._select(self.tables.households))

    def create_household(
        self, household: schemas.InsertHousehold
    ) -> schemas.Household:
        row = self._insert(self.tables.households, household.model_dump())
        return schemas.Household.model_validate(row)

    def initialize_households(self) -> int:
        return self._seed(
            self.tables.households,
            [household.model_dump() for household in seed_data.HOUSEHOLDS],
        )

    def get_members(self, household_id: int) -> list[schemas.Member]:
        members = self.tables.members
        rows = self._select(members, members.c.household_id == household_id)
        return self._many(schemas.Member, rows)

    def create_member(self, member: schemas.InsertMember) -> schemas.Member:
        row = self._insert(self.tables.members, member.model_dump())
        return schemas.Member.model_validate(row)

    def update_member_status(
        self, member_id: int, status: str, location: Optional[str] = None
    ) -> Optional[schemas.Member]:
        values: dict[str, Any] = {"status": status}
        if location:
            values["last_known_location"] = location
        row = self._update(self.tables.members, member_id, values)
        return self._one(schemas.Member, row)

    def initialize_members(self) -> int:
        households = self.get_households()
        if not households:
            logger.warning("No household to attach seed members to, skipping")
            return 0
        household_id = households[0].id
        rows = [
            schemas.InsertMember(household_id=household_id, **member).model_dump()
            for member in seed_data.MEMBERS
        ]
        return self._seed(self.tables.members, rows)

    # Check-ins

    def get_check_ins(self, member_id: int) -> list[schemas.CheckIn]:
        check_ins = self.tables.check_ins
        rows = self._select(check_ins, check_ins.c.member_id == member_id)
        return self._many(schemas.CheckIn, rows)

    def create_check_in(self, check_in: schemas.InsertCheckIn) -> schemas.CheckIn:
        row = self._insert(
            self.tables.check_ins, {**check_in.model_dump(), "timestamp": _utcnow()}
        )
        return schemas.CheckIn.model_validate(row)

    # Hazard zones

    def get_hazard_zones(self) -> list[schemas.HazardZone]:
        return self._many(schemas.HazardZone, self._select(self.tables.hazard_zones))

    def create_hazard_zone(
        self, zone: schemas.InsertHazardZone
    ) -> schemas.HazardZone:
        row = self._insert(self.tables.hazard_zones, zone.model_dump())
        return schemas.HazardZone.model_validate(row)

    def initialize_hazard_zones(self) -> int:
        return self._seed(
            self.tables.hazard_zones,
            [zone.model_dump() for zone in seed_data.HAZARD_ZONES],
        )

    # Points of interest

    def get_pois(self, type: Optional[str] = None) -> list[schemas.Poi]:
        pois = self.tables.pois
        if type:
            rows = self._select(pois, pois.c.type == type)
        else:
            rows = self._select(pois)
        return self._many(schemas.Poi, rows)

    def create_poi(self, poi: schemas.InsertPoi) -> schemas.Poi:
        row = self._insert(self.tables.pois, poi.model_dump())
        return schemas.Poi.model_validate(row)

    def initialize_pois(self) -> int:
        return self._seed(
            self.tables.pois, [poi.model_dump() for poi in seed_data.POIS]
        )

    def initialize_reference_data(self) -> dict[str, int]:
        """Seed every empty reference table. Safe to call on every start."""
        return {
            "go_bag_items": self.initialize_go_bag_items(),
            "evacuation_centers": self.initialize_evacuation_centers(),
            "households": self.initialize_households(),
            "members": self.initialize_members(),
            "hazard_zones": self.initialize_hazard_zones(),
            "pois": self.initialize_pois(),
        }
