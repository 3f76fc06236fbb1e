"""Mock persistence providers for testing."""

from dishka import Scope, provide

from commentary.domain.model import CommentField, Page, User
from commentary.domain.repository import (
    CommentFieldRepository,
    CommentRepository,
    PageRepository,
    UnitOfWork,
    UserRepository,
    VoteRepository,
)
from commentary.domain.value import CommentFlag, ModerationMode, PageId, UserId
from commentary.persistence.repository import StaticCommentFieldRepository
from commentary.persistence.repository.inmemory import (
    InMemoryCommentRepository,
    InMemoryPageRepository,
    InMemoryUnitOfWork,
    InMemoryUserRepository,
    InMemoryVoteRepository,
)
from commentary.util.di.infrastructure.persistence import PersistenceProvider

ADMIN_EMAIL = "admin@example.com"
EDITOR_EMAIL = "editor@example.com"

TEST_PAGE = Page(
    id=PageId(1001),
    path="/blog/first-post/",
    title="First Post",
    http_url="https://example.com/blog/first-post/",
)
OTHER_PAGE = Page(
    id=PageId(1002),
    path="/blog/second-post/",
    title="Second Post",
    http_url="https://example.com/blog/second-post/",
)
EDITOR = User(id=UserId(41), name="editor", email=EDITOR_EMAIL)

# Threaded, fully moderated field with every feature switched on
THREADED_FIELD = CommentField(
    name="comments",
    max_depth=3,
    moderation=ModerationMode.ALL,
    use_notify=CommentFlag.NOTIFY_REPLY | CommentFlag.NOTIFY_ALL,
    notification_email=ADMIN_EMAIL,
    use_votes=True,
    use_stars=True,
    use_website=True,
)
# Flat field published without moderation
FLAT_FIELD = CommentField(
    name="guestbook",
    max_depth=0,
    moderation=ModerationMode.NONE,
    use_notify=CommentFlag.NOTIFY_REPLY,
    notification_email=ADMIN_EMAIL,
)

TEST_FIELDS = [THREADED_FIELD, FLAT_FIELD]


class MockPersistenceProvider(PersistenceProvider):
    """Mock persistence provider using in-memory repositories.

    Repositories are APP-scoped so state survives across requests of one
    container; every test builds its own container, which keeps tests
    isolated.
    """

    __is_mock__ = True

    @provide(scope=Scope.APP)
    def get_field_repository(self) -> CommentFieldRepository:
        """Provide the fixed test comment fields."""
        return StaticCommentFieldRepository(TEST_FIELDS)

    @provide(scope=Scope.APP)
    def get_comment_repository(self) -> CommentRepository:
        """Provide in-memory comment repository."""
        return InMemoryCommentRepository()

    @provide(scope=Scope.APP)
    def get_vote_repository(self) -> VoteRepository:
        """Provide in-memory vote repository."""
        return InMemoryVoteRepository()

    @provide(scope=Scope.APP)
    def get_page_repository(self) -> PageRepository:
        """Provide in-memory page repository with the test pages."""
        repository = InMemoryPageRepository()
        repository.add(TEST_PAGE)
        repository.add(OTHER_PAGE)
        return repository

    @provide(scope=Scope.APP)
    def get_user_repository(self) -> UserRepository:
        """Provide in-memory user repository with the test editor."""
        repository = InMemoryUserRepository()
        repository.add(EDITOR)
        return repository

    @provide(scope=Scope.APP)
    def get_unit_of_work(self) -> UnitOfWork:
        """Provide a unit of work that only counts commits."""
        return InMemoryUnitOfWork()
