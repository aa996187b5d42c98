from __future__ import annotations

import dataclasses
from collections import Counter
from pathlib import Path

from shipbuild.core import events
from shipbuild.core.multiset import intersection_single
from tests.helpers.catalog import build_catalog, ids, record


def test_buy_card_adds_unequipped_upgrade_and_announces(tmp_path: Path) -> None:
    catalog = build_catalog(tmp_path)
    build = catalog.build_service.create_build("xwing", 2)
    added = record(catalog.event_bus, events.UPGRADES_ADD)

    build.upgrades.buy_card(3)

    assert ids(build.upgrades.purchased) == [3]
    assert ids(build.upgrades.unequipped) == [3]
    assert build.upgrades.disabled == []
    assert added == [build]


def test_starting_upgrade_is_equipped_into_its_free_slot(tmp_path: Path) -> None:
    catalog = build_catalog(tmp_path)
    build = catalog.build_service.create_build("xwing", 2)

    free_slot = build.upgrade_slots.enumerate_free()[0]

    assert ids(build.upgrades.equipped_upgrades) == [12]
    assert free_slot.equipped is build.current_ship.starting_upgrades[0]
    assert free_slot.equipped is not catalog.upgrades_repo.get(12)
    assert ids(build.upgrades.all) == [12]


def test_equip_places_purchased_upgrade_in_matching_slot(tmp_path: Path) -> None:
    catalog = build_catalog(tmp_path)
    build = catalog.build_service.create_build("xwing", 2)
    updates = record(catalog.event_bus, events.EQUIPPED_UPGRADES_UPDATE)
    build.upgrades.buy_card(3)

    build.upgrades.equip(3)

    torpedo_slot = build.upgrade_slots.enumerate_enabled()[0]
    assert ids(build.upgrades.equipped_upgrades) == [12, 3]
    assert torpedo_slot.type == "Torpedo"
    assert torpedo_slot.equipped is catalog.upgrades_repo.get(3)
    assert build.upgrades.unequipped == []
    assert updates == [build]


def test_equip_drops_upgrade_that_was_never_purchased(tmp_path: Path) -> None:
    catalog = build_catalog(tmp_path)
    build = catalog.build_service.create_build("xwing", 2)

    build.upgrades.equip(3)

    assert ids(build.upgrades.equipped_upgrades) == [12]


def test_ability_over_skill_cap_is_disabled(tmp_path: Path) -> None:
    catalog = build_catalog(tmp_path)
    build = catalog.build_service.create_build("awing", 4)
    loadout = build.upgrades

    loadout.buy_pilot_ability(1)
    loadout.buy_pilot_ability(2)

    assert ids(loadout.disabled_abilities) == [2]
    assert ids(loadout.unequipped_abilities) == [1]

    loadout.equip_ability(2)
    assert loadout.equipped_abilities == []

    loadout.equip_ability(1)
    assert ids(loadout.equipped_abilities) == [1]
    assert loadout.unequipped_abilities == []


def test_elite_slot_takes_elite_upgrade_before_ability(tmp_path: Path) -> None:
    catalog = build_catalog(tmp_path)
    build = catalog.build_service.create_build("awing", 4)
    loadout = build.upgrades
    loadout.buy_pilot_ability(1)
    loadout.buy_card(1)

    loadout.equip_ability(1)
    loadout.equip(1)

    elite_slot = build.upgrade_slots.enumerate_enabled()[1]
    assert elite_slot.equipped is catalog.upgrades_repo.get(1)
    assert ids(loadout.equipped_upgrades) == [1]
    assert loadout.equipped_abilities == []
    assert ids(loadout.unequipped_abilities) == [1]


def test_abilities_disabled_without_elite_slot(tmp_path: Path) -> None:
    catalog = build_catalog(tmp_path)
    build = catalog.build_service.create_build("xwing", 2)

    build.upgrades.buy_pilot_ability(1)
    assert ids(build.upgrades.disabled_abilities) == [1]

    catalog.build_service.set_pilot_skill(build, 4)
    assert build.upgrades.disabled_abilities == []
    assert ids(build.upgrades.unequipped_abilities) == [1]


def test_upgrades_illegal_on_ship_are_disabled(tmp_path: Path) -> None:
    catalog = build_catalog(tmp_path)
    build = catalog.build_service.create_build("xwing", 2)
    loadout = build.upgrades

    loadout.buy_card(11)  # large ships only
    loadout.buy_card(9)  # B-wing only
    loadout.buy_card(8)  # small ships only
    loadout.buy_card(10)  # no Crew slot on an X-wing

    assert ids(loadout.disabled) == [11, 9, 10]
    assert ids(loadout.unequipped) == [8]


def test_granted_slot_enables_and_holds_upgrade(tmp_path: Path) -> None:
    catalog = build_catalog(tmp_path)
    build = catalog.build_service.create_build("bwing", 2)
    loadout = build.upgrades
    loadout.buy_card(9)
    loadout.buy_card(10)
    assert ids(loadout.disabled) == [10]

    loadout.equip(9)
    assert loadout.disabled == []
    assert ids(loadout.unequipped) == [10]

    loadout.equip(10)
    granted = build.upgrade_slots.enumerate_granted()
    assert ids(loadout.equipped_upgrades) == [9, 10]
    assert len(granted) == 1
    assert granted[0].type == "Crew"
    assert granted[0].equipped is catalog.upgrades_repo.get(10)


def test_unequipping_granting_upgrade_drops_granted_occupant(tmp_path: Path) -> None:
    catalog = build_catalog(tmp_path)
    build = catalog.build_service.create_build("bwing", 2)
    loadout = build.upgrades
    for upgrade_id in (9, 10):
        loadout.buy_card(upgrade_id)
        loadout.equip(upgrade_id)

    loadout.unequip_upgrade(9)

    assert loadout.equipped_upgrades == []
    assert build.upgrade_slots.enumerate_granted() == []
    assert ids(loadout.disabled) == [10]
    assert ids(loadout.unequipped) == [9]


def test_grant_chain_creates_one_slot_per_grant(tmp_path: Path) -> None:
    catalog = build_catalog(tmp_path)
    build = catalog.build_service.create_build("chain", 2)
    loadout = build.upgrades
    for upgrade_id in (13, 14, 15, 16):
        loadout.buy_card(upgrade_id)
        loadout.equip(upgrade_id)

    granted = build.upgrade_slots.enumerate_granted()
    assert [slot.type for slot in granted] == ["Link", "Link2", "Link3"]
    assert ids(slot.equipped for slot in granted) == [14, 15, 16]
    assert ids(loadout.equipped_upgrades) == [13, 14, 15, 16]
    assert len(build.upgrade_slots) == 4

    loadout.refresh_upgrades_state()
    assert len(build.upgrade_slots.enumerate_granted()) == 3


def test_grant_cascade_places_cards_listed_before_their_slot(tmp_path: Path) -> None:
    catalog = build_catalog(tmp_path)
    build = catalog.build_service.create_build("chain", 2)
    cards = [catalog.upgrades_repo.get(upgrade_id) for upgrade_id in (16, 15, 14, 13)]

    equipped_upgrades, equipped_abilities = build.upgrades.equip_upgrades_to_slots(cards, [])

    assert ids(equipped_upgrades) == [13, 14, 15, 16]
    assert equipped_abilities == []
    assert len(build.upgrade_slots.enumerate_granted()) == 3


def test_free_slot_only_accepts_its_bound_instance(tmp_path: Path) -> None:
    catalog = build_catalog(tmp_path)
    build = catalog.build_service.create_build("xwing", 2)
    copy = dataclasses.replace(build.current_ship.starting_upgrades[0])

    equipped_upgrades, _ = build.upgrades.equip_upgrades_to_slots([copy], [])

    free_slot = build.upgrade_slots.enumerate_free()[0]
    modification_slot = build.upgrade_slots.enumerate_enabled()[2]
    assert free_slot.equipped is None
    assert modification_slot.equipped is copy
    assert equipped_upgrades == [copy]


def test_bought_copy_of_starting_upgrade_skips_the_free_slot(tmp_path: Path) -> None:
    catalog = build_catalog(tmp_path)
    build = catalog.build_service.create_build("xwing", 2, equipped_upgrade_ids=[])
    starting = build.current_ship.starting_upgrades[0]

    build.upgrades.buy_card(12)
    build.upgrades.equip(12)

    free_slot = build.upgrade_slots.enumerate_free()[0]
    modification_slot = build.upgrade_slots.enumerate_enabled()[2]
    assert free_slot.equipped is None
    assert modification_slot.equipped is build.upgrades.purchased[0]
    assert build.upgrades.purchased[0] is not starting
    assert ids(build.upgrades.equipped_upgrades) == [12]

    build.upgrades.equip(12)

    assert free_slot.equipped is starting
    assert ids(build.upgrades.equipped_upgrades) == [12, 12]
    assert build.upgrades.unequipped == []


def test_duplicate_purchases_are_tracked_separately(tmp_path: Path) -> None:
    catalog = build_catalog(tmp_path)
    build = catalog.build_service.create_build("xwing", 2)
    loadout = build.upgrades
    loadout.buy_card(3)
    loadout.buy_card(3)

    loadout.equip(3)
    assert ids(loadout.unequipped) == [3]

    loadout.lose_card(3)
    assert ids(loadout.purchased) == [3]
    assert ids(loadout.equipped_upgrades) == [12, 3]
    assert loadout.unequipped == []


def test_first_matching_upgrade_wins_slot(tmp_path: Path) -> None:
    catalog = build_catalog(tmp_path)
    build = catalog.build_service.create_build("xwing", 2)
    loadout = build.upgrades
    loadout.buy_card(4)
    loadout.buy_card(3)

    loadout.equip(3)
    loadout.equip(4)

    assert ids(loadout.equipped_upgrades) == [12, 3]
    assert ids(loadout.unequipped) == [4]


def test_lose_card_announces_even_when_not_found(tmp_path: Path) -> None:
    catalog = build_catalog(tmp_path)
    build = catalog.build_service.create_build("xwing", 2)
    lost = record(catalog.event_bus, events.UPGRADES_LOSE)
    abilities_lost = record(catalog.event_bus, events.PILOT_ABILITIES_LOSE)

    build.upgrades.lose_card(3)
    build.upgrades.lose_ability(1)

    assert lost == [build]
    assert abilities_lost == [build]


def test_unequip_is_silent_when_nothing_equipped(tmp_path: Path) -> None:
    catalog = build_catalog(tmp_path)
    build = catalog.build_service.create_build("awing", 4)
    updates = record(catalog.event_bus, events.EQUIPPED_UPGRADES_UPDATE)

    build.upgrades.unequip_upgrade(3)
    build.upgrades.unequip_ability(1)

    assert updates == []


def test_unequip_ability_frees_elite_slot(tmp_path: Path) -> None:
    catalog = build_catalog(tmp_path)
    build = catalog.build_service.create_build("awing", 4)
    loadout = build.upgrades
    loadout.buy_pilot_ability(1)
    loadout.equip_ability(1)
    assert not loadout.can_equip_abilities()

    loadout.unequip_ability(1)

    assert loadout.equipped_abilities == []
    assert loadout.can_equip_abilities()


def test_buying_unknown_card_is_ignored(tmp_path: Path) -> None:
    catalog = build_catalog(tmp_path)
    build = catalog.build_service.create_build("xwing", 2)
    added = record(catalog.event_bus, events.UPGRADES_ADD)

    build.upgrades.buy_card(999)

    assert build.upgrades.purchased == []
    assert added == [build]


def test_every_purchase_lands_in_exactly_one_bucket(tmp_path: Path) -> None:
    catalog = build_catalog(tmp_path)
    build = catalog.build_service.create_build("xwing", 4)
    loadout = build.upgrades
    for upgrade_id in (3, 3, 11, 5, 8):
        loadout.buy_card(upgrade_id)
    for upgrade_id in (3, 5, 8):
        loadout.equip(upgrade_id)
    loadout.buy_pilot_ability(1)
    loadout.buy_pilot_ability(2)
    loadout.equip_ability(1)

    equipped_purchases = intersection_single(loadout.equipped_upgrades, loadout.purchased)
    buckets = Counter(ids(loadout.disabled + loadout.unequipped + equipped_purchases))
    assert buckets == Counter(ids(loadout.purchased))

    ability_buckets = Counter(
        ids(loadout.disabled_abilities + loadout.unequipped_abilities + loadout.equipped_abilities)
    )
    assert ability_buckets == Counter(ids(loadout.purchased_abilities))
    assert ids(loadout.equipped_upgrades) == [12, 3, 5]


def test_refresh_is_idempotent(tmp_path: Path) -> None:
    catalog = build_catalog(tmp_path)
    build = catalog.build_service.create_build("bwing", 4)
    loadout = build.upgrades
    for upgrade_id in (9, 10, 3, 1):
        loadout.buy_card(upgrade_id)
        loadout.equip(upgrade_id)
    loadout.buy_pilot_ability(1)

    def snapshot():
        return (
            ids(loadout.equipped_upgrades),
            ids(loadout.equipped_abilities),
            ids(loadout.disabled),
            ids(loadout.disabled_abilities),
            ids(loadout.unequipped),
            ids(loadout.unequipped_abilities),
            len(build.upgrade_slots),
        )

    loadout.refresh_upgrades_state()
    first = snapshot()
    loadout.refresh_upgrades_state()
    assert snapshot() == first


def test_available_to_buy_excludes_starting_upgrade_twin(tmp_path: Path) -> None:
    catalog = build_catalog(tmp_path)
    build = catalog.build_service.create_build("ywing", 2)

    available = ids(build.upgrades.get_available_to_buy("Modification"))

    assert 6 not in available
    assert 20 not in available
    assert 5 in available
    assert 8 in available
    assert 9 not in available


def test_available_to_buy_allows_second_munition(tmp_path: Path) -> None:
    catalog = build_catalog(tmp_path)
    build = catalog.build_service.create_build("ywing", 2)

    build.upgrades.buy_card(3)

    assert ids(build.upgrades.get_available_to_buy("Torpedo")) == [3, 4, 22]


def test_available_to_buy_hides_held_cards_except_hull_and_shield(tmp_path: Path) -> None:
    catalog = build_catalog(tmp_path)
    build = catalog.build_service.create_build("xwing", 2)
    loadout = build.upgrades

    loadout.buy_card(5)
    loadout.buy_card(8)
    loadout.buy_card(17)

    modifications = ids(loadout.get_available_to_buy("Modification"))
    assert 5 in modifications
    assert 8 not in modifications
    assert 12 not in modifications
    assert loadout.get_available_to_buy("Title") == []


def test_abilities_available_to_buy_in_catalog_order(tmp_path: Path) -> None:
    catalog = build_catalog(tmp_path)
    build = catalog.build_service.create_build("xwing", 2)

    build.upgrades.buy_pilot_ability(3)

    assert ids(build.upgrades.get_abilities_available_to_buy()) == [1, 5, 2]
    assert build.upgrades.ability_already_in_build(catalog.pilots_repo.get(3))
    assert not build.upgrades.ability_already_in_build(catalog.pilots_repo.get(1))


def test_can_equip_upgrade_tracks_free_slots(tmp_path: Path) -> None:
    catalog = build_catalog(tmp_path)
    build = catalog.build_service.create_build("xwing", 2)
    loadout = build.upgrades

    assert loadout.can_equip_upgrade(3)
    assert not loadout.can_equip_upgrade(10)
    assert not loadout.can_equip_upgrade(999)

    loadout.buy_card(3)
    loadout.equip(3)
    assert not loadout.can_equip_upgrade(3)


def test_export_ids_rebuilds_same_loadout(tmp_path: Path) -> None:
    catalog = build_catalog(tmp_path)
    build = catalog.build_service.create_build("bwing", 4)
    for upgrade_id in (9, 10):
        build.upgrades.buy_card(upgrade_id)
        build.upgrades.equip(upgrade_id)
    build.upgrades.buy_pilot_ability(1)
    build.upgrades.equip_ability(1)

    exported = build.upgrades.export_ids()
    rebuilt = catalog.build_service.create_build("bwing", 4, **exported)

    assert exported == {
        "upgrade_ids": [9, 10],
        "equipped_upgrade_ids": [9, 10],
        "pilot_ids": [1],
        "equipped_ability_ids": [1],
    }
    assert rebuilt.upgrades.export_ids() == exported
