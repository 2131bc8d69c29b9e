from django.test import SimpleTestCase

from apps.approvals.definitions import decode_conditions
from apps.approvals.services.conditions import ConditionEvaluator


class ConditionEvaluatorTests(SimpleTestCase):

    def setUp(self):
        self.evaluator = ConditionEvaluator()
        self.context = {
            'entity_type': 'invoice',
            'amount': '1500.00',
            'department': 'Finance',
            'tags': ['urgent', 'export'],
            'customer': {'tier': 'gold'},
        }

    def evaluate(self, *conditions):
        return self.evaluator.evaluate(decode_conditions(list(conditions)), self.context)

    def test_empty_conditions_hold(self):
        self.assertTrue(self.evaluator.evaluate((), self.context))

    def test_numeric_comparisons(self):
        self.assertTrue(self.evaluate({'field': 'amount', 'operator': 'greater_than', 'value': 1000}))
        self.assertFalse(self.evaluate({'field': 'amount', 'operator': 'less_than', 'value': 1000}))
        self.assertTrue(self.evaluate({'field': 'amount', 'operator': 'equals', 'value': 1500}))

    def test_comparison_with_non_numeric_value_is_false(self):
        self.assertFalse(self.evaluate({'field': 'department', 'operator': 'greater_than', 'value': 10}))

    def test_missing_field_is_false(self):
        self.assertFalse(self.evaluate({'field': 'region', 'operator': 'not_equals', 'value': 'EU'}))

    def test_contains_on_string_and_list(self):
        self.assertTrue(self.evaluate({'field': 'department', 'operator': 'contains', 'value': 'Fin'}))
        self.assertTrue(self.evaluate({'field': 'tags', 'operator': 'contains', 'value': 'export'}))
        self.assertFalse(self.evaluate({'field': 'tags', 'operator': 'contains', 'value': 'domestic'}))

    def test_in_operator(self):
        self.assertTrue(self.evaluate({'field': 'department', 'operator': 'in', 'value': ['Finance', 'Ops']}))
        self.assertFalse(self.evaluate({'field': 'department', 'operator': 'in', 'value': ['Sales']}))

    def test_dotted_path(self):
        self.assertTrue(self.evaluate({'field': 'customer.tier', 'operator': 'equals', 'value': 'gold'}))

    def test_conditions_fold_left_to_right(self):
        # (false OR true) AND true
        self.assertTrue(self.evaluate(
            {'field': 'department', 'operator': 'equals', 'value': 'Sales'},
            {'field': 'amount', 'operator': 'greater_than', 'value': 100, 'logical_operator': 'OR'},
            {'field': 'entity_type', 'operator': 'equals', 'value': 'invoice'},
        ))
        # (true OR false) AND false
        self.assertFalse(self.evaluate(
            {'field': 'amount', 'operator': 'greater_than', 'value': 100},
            {'field': 'department', 'operator': 'equals', 'value': 'Sales', 'logical_operator': 'OR'},
            {'field': 'entity_type', 'operator': 'equals', 'value': 'bill'},
        ))
