"""
Tests for the vote ledger.
"""

import uuid

from django.test import TestCase

from accounts.tests.factories import UserFactory
from core.exceptions import InvalidTarget, NotFound, Unauthorized, ValidationFailed
from content.models import Vote
from content.services.votes import VoteLedger
from .factories import CommentFactory, PostFactory


class VoteLedgerTest(TestCase):

    def setUp(self):
        self.ledger = VoteLedger()
        self.post = PostFactory()
        self.alice = UserFactory()
        self.bob = UserFactory()

    def test_vote_then_switch_then_withdraw(self):
        tally = self.ledger.cast_vote('post', self.post.id, self.alice, 'up')
        self.assertEqual(tally.as_dict(), {'score': 1, 'up_count': 1, 'down_count': 0})

        tally = self.ledger.cast_vote('post', self.post.id, self.bob, 'down')
        self.assertEqual(tally.score, 0)

        tally = self.ledger.cast_vote('post', self.post.id, self.alice, 'down')
        self.assertEqual((tally.up_count, tally.down_count), (0, 2))

        tally = self.ledger.cast_vote('post', self.post.id, self.alice, 'none')
        self.assertEqual((tally.up_count, tally.down_count), (0, 1))

        self.post.refresh_from_db()
        self.assertEqual(self.post.upvote_count, 0)
        self.assertEqual(self.post.downvote_count, 1)
        self.assertEqual(self.post.score, -1)

    def test_voter_is_never_in_both_sets(self):
        self.ledger.cast_vote('post', self.post.id, self.alice, 'up')
        self.ledger.cast_vote('post', self.post.id, self.alice, 'down')

        up, down = self.ledger.voter_ids('post', self.post.id)
        self.assertEqual(up, set())
        self.assertEqual(down, {self.alice.id})

    def test_same_vote_twice_is_idempotent(self):
        self.ledger.cast_vote('post', self.post.id, self.alice, 'up')
        tally = self.ledger.cast_vote('post', self.post.id, self.alice, 'up')

        self.assertEqual(tally.up_count, 1)
        self.assertEqual(Vote.objects.filter(voter=self.alice).count(), 1)

    def test_withdraw_without_vote_is_noop(self):
        tally = self.ledger.cast_vote('post', self.post.id, self.alice, 'none')
        self.assertEqual(tally.as_dict(), {'score': 0, 'up_count': 0, 'down_count': 0})

    def test_comment_votes(self):
        comment = CommentFactory(post=self.post)
        self.ledger.cast_vote('comment', comment.id, self.alice, 'up')

        comment.refresh_from_db()
        self.assertEqual(comment.upvote_count, 1)
        self.assertEqual(self.ledger.user_vote('comment', comment.id, self.alice), 'up')
        self.assertIsNone(self.ledger.user_vote('comment', comment.id, self.bob))

    def test_tally_matches_rows(self):
        self.ledger.cast_vote('post', self.post.id, self.alice, 'up')
        self.ledger.cast_vote('post', self.post.id, self.bob, 'up')

        self.assertEqual(self.ledger.tally('post', self.post.id).up_count, 2)

    def test_self_vote_allowed_by_default(self):
        tally = self.ledger.cast_vote('post', self.post.id, self.post.author, 'up')
        self.assertEqual(tally.up_count, 1)

    def test_self_vote_can_be_disabled(self):
        ledger = VoteLedger(allow_self_vote=False)
        with self.assertRaises(Unauthorized):
            ledger.cast_vote('post', self.post.id, self.post.author, 'up')
        self.assertFalse(Vote.objects.exists())

    def test_invalid_direction(self):
        with self.assertRaises(ValidationFailed):
            self.ledger.cast_vote('post', self.post.id, self.alice, 'sideways')

    def test_unknown_content(self):
        with self.assertRaises(NotFound):
            self.ledger.cast_vote('post', uuid.uuid4(), self.alice, 'up')

    def test_malformed_id_is_not_found(self):
        with self.assertRaises(NotFound):
            self.ledger.cast_vote('post', 'not-a-uuid', self.alice, 'up')

    def test_events_are_not_votable(self):
        with self.assertRaises(InvalidTarget):
            self.ledger.cast_vote('event', self.post.id, self.alice, 'up')
