import pytest

from bidsmart.utils.mappers import map_confidence_to_level, map_equipment_stages, map_line_item_type


class TestConfidenceMapping:

    @pytest.mark.parametrize(
        "value,expected",
        [
            (0.95, "high"),
            (0.8, "high"),
            (0.79, "medium"),
            (0.5, "medium"),
            (0.49, "low"),
            (92, "high"),
            (80, "high"),
            (65, "medium"),
            (30, "low"),
        ],
    )
    def test_numeric_scales(self, value, expected):
        assert map_confidence_to_level(value) == expected

    def test_missing_or_zero_is_manual(self):
        assert map_confidence_to_level(None) == "manual"
        assert map_confidence_to_level(0) == "manual"

    def test_strings(self):
        assert map_confidence_to_level("high") == "high"
        assert map_confidence_to_level(" Medium ") == "medium"
        assert map_confidence_to_level("certain") == "manual"


class TestLineItemType:

    def test_known_types(self):
        assert map_line_item_type("equipment") == "equipment"
        assert map_line_item_type("Rebate_Processing") == "rebate_processing"

    def test_unknown_types(self):
        assert map_line_item_type("crane rental") == "other"
        assert map_line_item_type(None) == "other"
        assert map_line_item_type("") == "other"


class TestEquipmentStages:

    def test_stage_names(self):
        assert map_equipment_stages("single") == 1
        assert map_equipment_stages("two") == 2
        assert map_equipment_stages("Variable") == 99

    def test_unknown(self):
        assert map_equipment_stages("three") is None
        assert map_equipment_stages(None) is None
        assert map_equipment_stages(2) is None
