"""
Unit tests for alert classification, projection and SLA arithmetic.
"""

from datetime import date
from unittest.mock import patch

from django.test import SimpleTestCase, override_settings

from vulnreport.github_alerts.alerts import has_active_alert, is_active, project
from vulnreport.github_alerts.models import Alert, RawAlert
from vulnreport.github_alerts.sla import alert_date, days_to_breach
from unittests.github_alerts.factories import alert_node


class TestAlertClassifier(SimpleTestCase):
    """Test cases for is_active / has_active_alert"""

    def test_no_resolution_timestamps_is_active(self):
        """Test that an alert with no resolution timestamp is active."""
        self.assertTrue(is_active(RawAlert.from_node(alert_node())))

    def test_each_resolution_timestamp_resolves(self):
        """Test that any one resolution timestamp resolves the alert."""
        for field in ("dismissed_at", "fixed_at", "auto_dismissed_at"):
            with self.subTest(field=field):
                raw = RawAlert.from_node(alert_node(**{field: "2020-12-20T00:00:00Z"}))
                self.assertFalse(is_active(raw))

    def test_missing_timestamp_keys_are_active(self):
        """Nodes that do not mention the timestamps at all are active"""
        self.assertTrue(is_active(RawAlert.from_node({"createdAt": "2020-12-19"})))

    def test_non_mapping_node_is_active(self):
        """Test that a non-mapping node counts as active."""
        self.assertTrue(is_active(RawAlert.from_node(None)))

    def test_has_active_alert(self):
        """Test detecting at least one active alert in a list."""
        fixed = RawAlert.from_node(alert_node(fixed_at="2020-12-20"))
        dismissed = RawAlert.from_node(alert_node(dismissed_at="2020-12-20"))
        active = RawAlert.from_node(alert_node())

        self.assertTrue(has_active_alert([fixed, active, dismissed]))
        self.assertFalse(has_active_alert([fixed, dismissed]))
        self.assertFalse(has_active_alert([]))


class TestAlertProjector(SimpleTestCase):
    """Test cases for projecting raw alert nodes"""

    def test_valid_alert(self):
        """Test projecting a fully populated alert node."""
        alert = project(RawAlert.from_node(alert_node(severity="MODERATE")))

        self.assertEqual(alert.package_name, "Package Name")
        self.assertEqual(alert.affected_range, "A range of things")
        self.assertEqual(alert.severity, "MODERATE")
        self.assertEqual(alert.created_at, "2020-12-19T10:00:00Z")
        self.assertEqual(alert.fixed_in, "IDENTIFIER")
        self.assertEqual(alert.details, "This is the summary")

    def test_missing_security_advisory(self):
        """A missing advisory only loses the details"""
        alert = project(RawAlert.from_node(alert_node(summary=None)))

        self.assertIsInstance(alert, Alert)
        self.assertIsNone(alert.details)
        self.assertEqual(alert.package_name, "Package Name")
        self.assertEqual(alert.fixed_in, "IDENTIFIER")

    def test_null_nested_objects(self):
        """Test that null nested objects project to None fields."""
        node = alert_node()
        node["securityVulnerability"]["firstPatchedVersion"] = None
        node["securityVulnerability"]["package"] = None

        alert = project(RawAlert.from_node(node))

        self.assertIsNone(alert.fixed_in)
        self.assertIsNone(alert.package_name)
        self.assertEqual(alert.severity, "HIGH")

    def test_empty_node(self):
        """Test that an empty node projects to an empty Alert."""
        self.assertEqual(project(RawAlert.from_node({})), Alert())

    def test_unexpected_nested_types(self):
        """Test that nested values of the wrong type are ignored."""
        node = {"securityVulnerability": "oops", "securityAdvisory": ["summary"]}
        self.assertEqual(project(RawAlert.from_node(node)), Alert())

    def test_severity_label(self):
        """Test severity capitalization for display."""
        self.assertEqual(Alert(severity="CRITICAL").severity_label, "Critical")
        self.assertEqual(Alert(severity="moderate").severity_label, "Moderate")
        self.assertIsNone(Alert().severity_label)


class TestDaysToBreach(SimpleTestCase):
    """Test cases for SLA arithmetic"""

    def test_seven_days_left(self):
        """Test days remaining inside the SLA window."""
        self.assertEqual(days_to_breach("2020-12-19", today=date(2020, 12, 26)), 7)

    def test_uses_date_portion_only(self):
        """Test that the time of day is ignored."""
        self.assertEqual(days_to_breach("2020-12-19T23:59:59Z", today=date(2020, 12, 26)), 7)

    def test_breached(self):
        """Test that a breached SLA gives a negative count."""
        self.assertEqual(days_to_breach("2020-12-01T08:00:00Z", today=date(2020, 12, 26)), -11)

    def test_counts_weekends(self):
        """Test that calendar days, not working days, are counted."""
        # Friday to the following Monday
        self.assertEqual(days_to_breach("2020-12-18", today=date(2020, 12, 21)), 11)

    @override_settings(VULNREPORT_SLA_DAYS=30)
    def test_configurable_sla(self):
        """Test the VULNREPORT_SLA_DAYS setting."""
        self.assertEqual(days_to_breach("2020-12-19", today=date(2020, 12, 26)), 23)

    def test_absent_or_unreadable(self):
        """Test that missing or unparseable dates give None."""
        self.assertIsNone(days_to_breach(None, today=date(2020, 12, 26)))
        self.assertIsNone(days_to_breach("", today=date(2020, 12, 26)))
        self.assertIsNone(days_to_breach("yesterday", today=date(2020, 12, 26)))
        self.assertIsNone(days_to_breach("2020-13-45", today=date(2020, 12, 26)))

    @patch('vulnreport.github_alerts.sla.timezone.localdate')
    def test_defaults_to_today(self, mock_localdate):
        """Test that today defaults to the local date."""
        mock_localdate.return_value = date(2020, 12, 26)
        self.assertEqual(days_to_breach("2020-12-19"), 7)
        self.assertEqual(Alert(created_at="2020-12-19").days_to_breach(), 7)

    def test_alert_date(self):
        """Test parsing the date portion of createdAt."""
        self.assertEqual(alert_date("2020-12-19T10:00:00Z"), date(2020, 12, 19))
        self.assertIsNone(alert_date(20201219))
