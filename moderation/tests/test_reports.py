"""
Tests for filing and browsing reports.
"""

import uuid
from datetime import timedelta

from django.test import TestCase
from django.utils import timezone

from accounts.tests.factories import StaffFactory, UserFactory
from core.exceptions import DuplicateReport, InvalidTarget, NotFound, ValidationFailed
from content.tests.factories import CommentFactory, EventFactory, PostFactory
from moderation.models import Report
from moderation.services.engine import ModerationEngine
from moderation.services.reports import ReportRegistry
from notifications.realtime import InMemoryPushBackend
from notifications.services.dispatcher import NotificationDispatcher
from .factories import ReportFactory


class FileReportTest(TestCase):

    def setUp(self):
        self.registry = ReportRegistry()
        self.reporter = UserFactory()
        self.post = PostFactory()

    def test_file_report(self):
        report = self.registry.file_report(self.reporter, 'post', self.post.id, 'spam')

        self.assertEqual(report.status, Report.PENDING)
        self.assertEqual(report.target_type, 'post')
        self.assertEqual(report.object_id, self.post.id)
        self.assertEqual(report.priority, Report.MEDIUM)
        self.assertIsNone(report.resolution)

    def test_every_target_kind_is_reportable(self):
        targets = [
            ('comment', CommentFactory().id),
            ('event', EventFactory().id),
            ('user', UserFactory().id),
        ]
        for content_type, content_id in targets:
            report = self.registry.file_report(self.reporter, content_type, content_id, 'other')
            self.assertEqual(report.target_type, content_type)

    def test_serious_reasons_get_high_priority(self):
        report = self.registry.file_report(self.reporter, 'post', self.post.id, 'hate_speech')
        self.assertEqual(report.priority, Report.HIGH)

    def test_one_report_per_reporter_and_target(self):
        self.registry.file_report(self.reporter, 'post', self.post.id, 'spam')

        with self.assertRaises(DuplicateReport):
            self.registry.file_report(self.reporter, 'post', self.post.id, 'harassment')

    def test_duplicate_even_after_dismissal(self):
        report = ReportFactory(
            target=self.post,
            reporter=self.reporter,
            status=Report.DISMISSED,
            resolution_action='none',
            resolved_at=timezone.now(),
        )
        self.assertTrue(report.is_terminal)

        with self.assertRaises(DuplicateReport):
            self.registry.file_report(self.reporter, 'post', self.post.id, 'spam')

    def test_reports_from_different_reporters_are_independent(self):
        engine = ModerationEngine(
            dispatcher=NotificationDispatcher(push_backend=InMemoryPushBackend()))
        first = self.registry.file_report(self.reporter, 'post', self.post.id, 'spam')
        second = self.registry.file_report(UserFactory(), 'post', self.post.id, 'spam')

        engine.dismiss(first.id, StaffFactory())

        first.refresh_from_db()
        second.refresh_from_db()
        self.assertEqual(first.status, Report.DISMISSED)
        self.assertEqual(second.status, Report.PENDING)

    def test_unknown_content_type(self):
        with self.assertRaises(InvalidTarget):
            self.registry.file_report(self.reporter, 'poll', self.post.id, 'spam')

    def test_missing_entity(self):
        with self.assertRaises(InvalidTarget):
            self.registry.file_report(self.reporter, 'post', uuid.uuid4(), 'spam')

    def test_malformed_id(self):
        with self.assertRaises(InvalidTarget):
            self.registry.file_report(self.reporter, 'post', 'abc', 'spam')

    def test_invalid_reason(self):
        with self.assertRaises(ValidationFailed):
            self.registry.file_report(self.reporter, 'post', self.post.id, 'boring')

    def test_description_is_sanitized_and_bounded(self):
        report = self.registry.file_report(
            self.reporter, 'post', self.post.id, 'spam',
            description='<script>alert(1)</script>Buy <b>now</b>')
        self.assertEqual(report.description, 'Buy now')

        with self.assertRaises(ValidationFailed):
            self.registry.file_report(
                UserFactory(), 'post', self.post.id, 'spam', description='x' * 1001)


class ListReportsTest(TestCase):

    def setUp(self):
        self.registry = ReportRegistry()

    def test_filters(self):
        ReportFactory()
        ReportFactory(reason=Report.HARASSMENT, priority=Report.HIGH)
        ReportFactory(target=CommentFactory())

        by_priority = self.registry.list_reports({'priority': 'high'})
        self.assertEqual(by_priority['pagination']['total'], 1)

        by_type = self.registry.list_reports({'content_type': 'comment'})
        self.assertEqual(by_type['pagination']['total'], 1)

        by_reason = self.registry.list_reports({'reason': 'spam'})
        self.assertEqual(by_reason['pagination']['total'], 2)

        unfiltered = self.registry.list_reports({'status': '', 'reason': None})
        self.assertEqual(unfiltered['pagination']['total'], 3)

    def test_pagination(self):
        for _ in range(5):
            ReportFactory()

        result = self.registry.list_reports(page=2, limit=2)

        self.assertEqual(len(result['items']), 2)
        self.assertEqual(result['pagination'], {'page': 2, 'limit': 2, 'total': 5, 'pages': 3})

    def test_newest_first(self):
        older = ReportFactory()
        newer = ReportFactory()
        Report.objects.filter(pk=older.pk).update(created_at=timezone.now() - timedelta(days=1))

        result = self.registry.list_reports()
        self.assertEqual([r.id for r in result['items']], [newer.id, older.id])

    def test_invalid_filter_values(self):
        for filters in ({'status': 'closed'}, {'priority': 'urgent'}, {'reason': 'boring'}):
            with self.assertRaises(ValidationFailed):
                self.registry.list_reports(filters)
        with self.assertRaises(InvalidTarget):
            self.registry.list_reports({'content_type': 'poll'})
        with self.assertRaises(ValidationFailed):
            self.registry.list_reports(ordering='reporter')
        with self.assertRaises(ValidationFailed):
            self.registry.list_reports(limit=101)

    def test_detail_includes_entity(self):
        report = ReportFactory()

        detail = self.registry.get_report_detail(report.id)

        self.assertEqual(detail.report, report)
        self.assertEqual(detail.content.pk, report.object_id)

    def test_detail_of_deleted_entity(self):
        post = PostFactory()
        report = ReportFactory(target=post)
        post.delete()

        detail = self.registry.get_report_detail(report.id)
        self.assertIsNone(detail.content)

    def test_unknown_report(self):
        with self.assertRaises(NotFound):
            self.registry.get_report_detail(uuid.uuid4())
