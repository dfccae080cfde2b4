"""
Vote Ledger for posts and comments.

Each voter holds at most one Vote row per item. Casting a vote removes the
voter's existing row and then inserts the new one (unless the direction is
`none`), all under a row lock on the voted item, so concurrent votes on the
same item serialize and no voter can end up counted twice.
"""

from dataclasses import dataclass
from typing import Optional, Set, Tuple

from django.conf import settings
from django.contrib.contenttypes.models import ContentType
from django.db import transaction
from django.db.models import Count, Q
import structlog

from core.exceptions import InvalidTarget, NotFound, Unauthorized, ValidationFailed
from core.utils import parse_uuid
from ..models import Post, Comment, Vote

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class VoteTally:
    up_count: int
    down_count: int

    @property
    def score(self) -> int:
        return self.up_count - self.down_count

    def as_dict(self):
        return {
            'score': self.score,
            'up_count': self.up_count,
            'down_count': self.down_count,
        }


class VoteLedger:
    """
    Records up/down votes and keeps the denormalized counters in step.
    """

    UP = Vote.UP
    DOWN = Vote.DOWN
    NONE = 'none'
    DIRECTIONS = (UP, DOWN, NONE)

    VOTABLE_MODELS = {
        'post': Post,
        'comment': Comment,
    }

    def __init__(self, allow_self_vote: Optional[bool] = None):
        self._allow_self_vote = allow_self_vote

    @property
    def allow_self_vote(self) -> bool:
        if self._allow_self_vote is not None:
            return self._allow_self_vote
        return getattr(settings, 'VOTING', {}).get('ALLOW_SELF_VOTE', True)

    def _model_for(self, content_type):
        try:
            return self.VOTABLE_MODELS[content_type]
        except (KeyError, TypeError):
            raise InvalidTarget(f'Cannot vote on content type: {content_type}', field='content_type')

    def cast_vote(self, content_type: str, content_id, voter, direction: str) -> VoteTally:
        """
        Cast, change or withdraw a vote.

        Calling twice with the same direction leaves the ledger unchanged.

        Args:
            content_type: 'post' or 'comment'
            content_id: Id of the voted item
            voter: The authenticated user voting
            direction: 'up', 'down' or 'none' (withdraw)

        Returns:
            VoteTally: Counts after the vote

        Raises:
            ValidationFailed: Unknown direction
            InvalidTarget: Unknown content type
            NotFound: The item does not exist
            Unauthorized: Self-voting is disabled and the voter is the author
        """
        if direction not in self.DIRECTIONS:
            raise ValidationFailed(
                f'direction must be one of: {", ".join(self.DIRECTIONS)}', field='direction')

        model = self._model_for(content_type)
        label = content_type.capitalize()
        pk = parse_uuid(content_id, label)

        with transaction.atomic():
            try:
                content = model.objects.select_for_update().get(pk=pk)
            except model.DoesNotExist:
                raise NotFound(f'{label} not found.')

            if not self.allow_self_vote and content.author_id == voter.pk:
                raise Unauthorized('You cannot vote on your own content.')

            ct = ContentType.objects.get_for_model(model)
            Vote.objects.filter(voter=voter, content_type=ct, object_id=content.pk).delete()
            if direction != self.NONE:
                Vote.objects.create(
                    voter=voter,
                    content_type=ct,
                    object_id=content.pk,
                    direction=direction,
                )

            tally = self._count(ct, content.pk)
            model.objects.filter(pk=content.pk).update(
                upvote_count=tally.up_count,
                downvote_count=tally.down_count,
            )

        logger.info(
            "Vote cast",
            content_type=content_type,
            content_id=str(content.pk),
            voter_id=str(voter.pk),
            direction=direction,
            score=tally.score,
        )
        return tally

    def _count(self, ct, object_id) -> VoteTally:
        counts = Vote.objects.filter(content_type=ct, object_id=object_id).aggregate(
            up=Count('id', filter=Q(direction=Vote.UP)),
            down=Count('id', filter=Q(direction=Vote.DOWN)),
        )
        return VoteTally(up_count=counts['up'], down_count=counts['down'])

    def tally(self, content_type: str, content_id) -> VoteTally:
        """Current counts for an item, computed from the vote rows."""
        model = self._model_for(content_type)
        pk = parse_uuid(content_id, content_type.capitalize())
        if not model.objects.filter(pk=pk).exists():
            raise NotFound(f'{content_type.capitalize()} not found.')
        return self._count(ContentType.objects.get_for_model(model), pk)

    def voter_ids(self, content_type: str, content_id) -> Tuple[Set, Set]:
        """
        Return the (up, down) voter id sets of an item.
        """
        model = self._model_for(content_type)
        pk = parse_uuid(content_id, content_type.capitalize())
        rows = Vote.objects.filter(
            content_type=ContentType.objects.get_for_model(model),
            object_id=pk,
        ).values_list('voter_id', 'direction')

        up, down = set(), set()
        for voter_id, direction in rows:
            (up if direction == Vote.UP else down).add(voter_id)
        return up, down

    def user_vote(self, content_type: str, content_id, voter) -> Optional[str]:
        """The voter's current direction on an item, or None."""
        model = self._model_for(content_type)
        return Vote.objects.filter(
            voter=voter,
            content_type=ContentType.objects.get_for_model(model),
            object_id=parse_uuid(content_id, content_type.capitalize()),
        ).values_list('direction', flat=True).first()
