"""
Workflow document decoding and validation
"""
from decimal import Decimal

from django.test import SimpleTestCase

from apps.approvals.definitions import (
    decode_conditions,
    decode_escalation_rules,
    decode_steps,
    encode_conditions,
    encode_escalation_rules,
    encode_steps,
    normalize_workflow_config,
)
from apps.approvals.exceptions import InvalidConfiguration


def _step(step_id, order, **extra):
    data = {'id': step_id, 'name': step_id.title(), 'order': order, 'approver_type': 'role', 'role': 'manager'}
    data.update(extra)
    return data


class StepDecodingTests(SimpleTestCase):

    def test_steps_are_sorted_by_order(self):
        steps = decode_steps([_step('second', 2), _step('first', 1)])
        self.assertEqual([step.id for step in steps], ['first', 'second'])

    def test_camel_case_keys_are_accepted(self):
        steps = decode_steps([{
            'id': 'finance',
            'name': 'Finance',
            'order': 1,
            'approverType': 'amount_based',
            'amountThreshold': '1000.50',
            'autoApprove': False,
            'escalationHours': 24,
        }])
        self.assertEqual(steps[0].approver_type, 'amount_based')
        self.assertEqual(steps[0].amount_threshold, Decimal('1000.50'))
        self.assertEqual(steps[0].escalation_hours, 24)

    def test_encode_writes_threshold_as_string(self):
        steps = decode_steps([_step('finance', 1, approver_type='amount_based', amount_threshold=5000)])
        encoded = encode_steps(steps)
        self.assertEqual(encoded[0]['amount_threshold'], '5000')
        self.assertEqual(decode_steps(encoded), steps)

    def test_empty_step_list_rejected(self):
        with self.assertRaises(InvalidConfiguration):
            decode_steps([])

    def test_duplicate_ids_rejected(self):
        with self.assertRaises(InvalidConfiguration):
            decode_steps([_step('review', 1), _step('review', 2)])

    def test_duplicate_orders_rejected(self):
        with self.assertRaises(InvalidConfiguration):
            decode_steps([_step('a', 1), _step('b', 1)])

    def test_order_must_start_at_one(self):
        with self.assertRaises(InvalidConfiguration):
            decode_steps([_step('a', 2)])

    def test_unknown_approver_type_rejected(self):
        with self.assertRaises(InvalidConfiguration):
            decode_steps([_step('a', 1, approver_type='committee')])

    def test_user_step_requires_approver_id(self):
        with self.assertRaises(InvalidConfiguration):
            decode_steps([_step('a', 1, approver_type='user', role=None)])

    def test_role_step_requires_role(self):
        with self.assertRaises(InvalidConfiguration):
            decode_steps([_step('a', 1, role='')])

    def test_amount_step_requires_numeric_threshold(self):
        with self.assertRaises(InvalidConfiguration):
            decode_steps([_step('a', 1, approver_type='amount_based', amount_threshold='lots')])

    def test_fractional_escalation_hours_rejected(self):
        with self.assertRaises(InvalidConfiguration):
            decode_steps([_step('a', 1, escalation_hours=1.5)])

    def test_in_condition_requires_list(self):
        with self.assertRaises(InvalidConfiguration):
            decode_steps([_step('a', 1, conditions=[{'field': 'region', 'operator': 'in', 'value': 'EU'}])])


class EscalationRuleTests(SimpleTestCase):

    def setUp(self):
        self.steps = decode_steps([_step('review', 1)])

    def test_rule_must_reference_known_step(self):
        with self.assertRaises(InvalidConfiguration):
            decode_escalation_rules([{'step_id': 'missing', 'escalate_to': 'director'}], self.steps)

    def test_specific_user_requires_user_id(self):
        with self.assertRaises(InvalidConfiguration):
            decode_escalation_rules([{'step_id': 'review', 'escalate_to': 'specific_user'}], self.steps)

    def test_one_rule_per_step(self):
        rule = {'step_id': 'review', 'escalate_to': 'director'}
        with self.assertRaises(InvalidConfiguration):
            decode_escalation_rules([rule, rule], self.steps)

    def test_unknown_channel_rejected(self):
        with self.assertRaises(InvalidConfiguration):
            decode_escalation_rules(
                [{'step_id': 'review', 'escalate_to': 'director', 'notification_channels': ['pager']}],
                self.steps,
            )

    def test_user_id_dropped_for_role_targets(self):
        rules = decode_escalation_rules(
            [{'stepId': 'review', 'escalateTo': 'ceo', 'escalateToUserId': 'someone', 'escalationHours': 4}],
            self.steps,
        )
        self.assertEqual(rules[0].escalate_to, 'ceo')
        self.assertIsNone(rules[0].escalate_to_user_id)
        self.assertEqual(rules[0].escalation_hours, 4)


class NormalizeWorkflowConfigTests(SimpleTestCase):

    def test_defaults_applied(self):
        values = normalize_workflow_config({
            'name': '  Invoice approval ',
            'entityType': 'invoice',
            'steps': [_step('review', 1)],
        })
        self.assertEqual(values['name'], 'Invoice approval')
        self.assertEqual(values['priority'], 'medium')
        self.assertEqual(values['entity_sub_type'], '')
        self.assertEqual(values['conditions'], [])
        self.assertEqual(values['escalation_rules'], [])
        self.assertFalse(values['auto_approval'])
        self.assertTrue(values['is_active'])

    def test_unknown_entity_type_rejected(self):
        with self.assertRaises(InvalidConfiguration):
            normalize_workflow_config({'name': 'x', 'entity_type': 'timesheet', 'steps': [_step('a', 1)]})

    def test_unknown_priority_rejected(self):
        with self.assertRaises(InvalidConfiguration):
            normalize_workflow_config({
                'name': 'x', 'entity_type': 'invoice', 'priority': 'urgent', 'steps': [_step('a', 1)],
            })

    def test_name_required(self):
        with self.assertRaises(InvalidConfiguration):
            normalize_workflow_config({'name': ' ', 'entity_type': 'invoice', 'steps': [_step('a', 1)]})


class CodecRoundTripTests(SimpleTestCase):

    def test_condition_list(self):
        conditions = decode_conditions([
            {'field': 'amount', 'operator': 'greater_than', 'value': 10000},
            {'field': 'region', 'operator': 'in', 'value': ['EU', 'UK'], 'logicalOperator': 'or'},
            {'field': 'vendor.name', 'operator': 'contains', 'value': 'Acme'},
        ])
        self.assertEqual(decode_conditions(encode_conditions(conditions)), conditions)
        self.assertEqual(conditions[1].logical_operator, 'OR')

    def test_escalation_rule_list(self):
        rules = decode_escalation_rules([
            {'step_id': 'manager', 'escalate_to': 'director', 'escalation_hours': 8,
             'notification_channels': ['email', 'slack']},
            {'step_id': 'cfo', 'escalate_to': 'specific_user', 'escalate_to_user_id': 'u-42'},
        ])
        self.assertEqual(decode_escalation_rules(encode_escalation_rules(rules)), rules)

    def test_multi_step_list_with_step_conditions(self):
        steps = decode_steps([
            _step('cfo', 3, approver_type='user', role=None, approver_id='u-7', escalation_hours=48),
            _step('manager', 1, auto_approve=True),
            _step('finance', 2, approver_type='amount_based', role=None, amount_threshold='2500.75',
                  conditions=[
                      {'field': 'amount', 'operator': 'greater_than', 'value': 100},
                      {'field': 'region', 'operator': 'equals', 'value': 'EU', 'logical_operator': 'AND'},
                  ]),
        ])
        decoded = decode_steps(encode_steps(steps))

        self.assertEqual(decoded, steps)
        self.assertEqual([step.id for step in decoded], ['manager', 'finance', 'cfo'])
        self.assertEqual(len(decoded[1].conditions), 2)

    def test_unknown_step_keys_are_not_carried(self):
        steps = decode_steps([_step('review', 1, is_required=False)])
        self.assertNotIn('is_required', encode_steps(steps)[0])
