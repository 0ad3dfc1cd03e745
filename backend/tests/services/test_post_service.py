import pytest

from app.exceptions import ConflictError, ValidationError
from app.models.category import CategoryCreate
from app.models.post import PostCreate, PostUpdate, PostFilters
from app.services.post_service import normalize_text


@pytest.fixture
async def tech(db, category_service):
    return await category_service.create_category(db, CategoryCreate(name="Tech"))


@pytest.fixture
async def travel(db, category_service):
    return await category_service.create_category(db, CategoryCreate(name="Travel"))


class TestCreatePost:
    """Tests for creating posts."""

    async def test_create_published_post(self, db, post_service):
        """Test a new post gets a slug, is published and has matching timestamps."""
        post = await post_service.create_post(
            db, PostCreate(title="My First Post", content="Hello there")
        )

        assert post.id is not None
        assert post.slug == "my-first-post"
        assert post.published is True
        assert post.created_at == post.updated_at
        assert post.category is None

    async def test_draft_is_unpublished(self, db, post_service):
        """Test is_draft stores the post unpublished."""
        post = await post_service.create_post(
            db, PostCreate(title="Draft", content="Work in progress", is_draft=True)
        )

        assert post.published is False

    async def test_category_is_embedded(self, db, post_service, tech):
        """Test the created post carries its category."""
        post = await post_service.create_post(
            db, PostCreate(title="Gadgets", content="Phones", category_id=tech.id)
        )

        assert post.category_id == tech.id
        assert post.category.name == "Tech"
        assert post.category.slug == "tech"

    @pytest.mark.parametrize("title,content", [("", "Body"), ("Title", ""), ("   ", "Body"), ("Title", "  ")])
    async def test_title_and_content_required(self, db, post_service, title, content):
        """Test empty or blank title and content are rejected."""
        with pytest.raises(ValidationError, match="Title and content are required"):
            await post_service.create_post(db, PostCreate(title=title, content=content))

    async def test_title_without_slug_characters_is_rejected(self, db, post_service):
        """Test a title that slugifies to nothing is rejected."""
        with pytest.raises(ValidationError):
            await post_service.create_post(db, PostCreate(title="???", content="Body"))

    async def test_overlong_title_is_rejected(self, db, post_service):
        """Test a title whose slug would not fit the column is rejected."""
        data = PostCreate.model_construct(title="a" * 300, content="Body", category_id=None, is_draft=False)

        with pytest.raises(ValidationError, match="too long"):
            await post_service.create_post(db, data)

    async def test_duplicate_slug_conflicts(self, db, post_service):
        """Test two posts with the same slug conflict."""
        await post_service.create_post(db, PostCreate(title="Hello World", content="One"))

        with pytest.raises(ConflictError):
            await post_service.create_post(db, PostCreate(title="hello world!", content="Two"))

        posts = await post_service.get_all_posts(db)
        assert len(posts) == 1


class TestGetPosts:
    """Tests for reading posts."""

    async def test_newest_first(self, db, post_service):
        """Test the default ordering is newest first."""
        for title in ["First", "Second", "Third"]:
            await post_service.create_post(db, PostCreate(title=title, content="Body"))

        posts = await post_service.get_all_posts(db)

        assert [p.title for p in posts] == ["Third", "Second", "First"]

    async def test_oldest_and_title_sort(self, db, post_service):
        """Test the oldest and title sort orders."""
        for title in ["Banana", "Cherry", "Apple"]:
            await post_service.create_post(db, PostCreate(title=title, content="Body"))

        oldest = await post_service.get_all_posts(db, PostFilters(sort="oldest"))
        by_title = await post_service.get_all_posts(db, PostFilters(sort="title"))

        assert [p.title for p in oldest] == ["Banana", "Cherry", "Apple"]
        assert [p.title for p in by_title] == ["Apple", "Banana", "Cherry"]

    async def test_drafts_included_unless_published_only(self, db, post_service):
        """Test drafts are listed by default and hidden with published_only."""
        await post_service.create_post(db, PostCreate(title="Live", content="Body"))
        await post_service.create_post(db, PostCreate(title="Hidden", content="Body", is_draft=True))

        everything = await post_service.get_all_posts(db)
        published = await post_service.get_all_posts(db, PostFilters(published_only=True))

        assert len(everything) == 2
        assert [p.title for p in published] == ["Live"]

    async def test_search_ignores_case_and_accents(self, db, post_service):
        """Test search matches title or content regardless of case and accents."""
        await post_service.create_post(db, PostCreate(title="Paris trip", content="Un café au lait"))
        await post_service.create_post(db, PostCreate(title="CAFE reviews", content="Espresso"))
        await post_service.create_post(db, PostCreate(title="Gardening", content="Tomatoes"))

        posts = await post_service.get_all_posts(db, PostFilters(search="Cafe", sort="title"))

        assert [p.title for p in posts] == ["CAFE reviews", "Paris trip"]

    async def test_blank_search_matches_everything(self, db, post_service):
        """Test a whitespace search does not filter."""
        await post_service.create_post(db, PostCreate(title="One", content="Body"))

        assert len(await post_service.get_all_posts(db, PostFilters(search="   "))) == 1

    async def test_get_by_id(self, db, post_service):
        """Test fetching a post by id."""
        created = await post_service.create_post(db, PostCreate(title="Find Me", content="Body"))

        post = await post_service.get_post_by_id(db, created.id)

        assert post.title == "Find Me"

    async def test_get_missing_returns_none(self, db, post_service):
        """Test an unknown id returns None."""
        assert await post_service.get_post_by_id(db, 999) is None

    async def test_by_category(self, db, post_service, tech, travel):
        """Test listing posts of one category, drafts included."""
        await post_service.create_post(db, PostCreate(title="Laptops", content="Body", category_id=tech.id))
        await post_service.create_post(db, PostCreate(title="Phones", content="Body", category_id=tech.id, is_draft=True))
        await post_service.create_post(db, PostCreate(title="Japan", content="Body", category_id=travel.id))
        await post_service.create_post(db, PostCreate(title="Uncategorized", content="Body"))

        posts = await post_service.get_posts_by_category(db, tech.id)

        assert sorted(p.title for p in posts) == ["Laptops", "Phones"]
        assert all(p.category.name == "Tech" for p in posts)

    async def test_by_unknown_category_is_empty(self, db, post_service):
        """Test an unknown category yields no posts."""
        assert await post_service.get_posts_by_category(db, 999) == []


class TestUpdatePost:
    """Tests for updating posts."""

    async def test_update_fields_and_slug(self, db, post_service, tech):
        """Test title, content, category and slug are replaced."""
        post = await post_service.create_post(db, PostCreate(title="Old Title", content="Old"))

        updated = await post_service.update_post(
            db, post.id, PostUpdate(title="New Title", content="New", category_id=tech.id)
        )

        assert updated.title == "New Title"
        assert updated.content == "New"
        assert updated.slug == "new-title"
        assert updated.category.name == "Tech"
        assert updated.created_at == post.created_at
        assert updated.updated_at >= post.updated_at

    async def test_category_change_reflected(self, db, post_service, tech, travel):
        """Test moving a post to another category updates the embedded category."""
        post = await post_service.create_post(
            db, PostCreate(title="Moving", content="Body", category_id=tech.id)
        )

        updated = await post_service.update_post(
            db, post.id, PostUpdate(title="Moving", content="Body", category_id=travel.id)
        )

        assert updated.category.name == "Travel"

    async def test_omitted_category_is_cleared(self, db, post_service, tech):
        """Test leaving out the category removes it."""
        post = await post_service.create_post(
            db, PostCreate(title="Loose", content="Body", category_id=tech.id)
        )

        updated = await post_service.update_post(db, post.id, PostUpdate(title="Loose", content="Body"))

        assert updated.category_id is None
        assert updated.category is None

    async def test_publish_flag(self, db, post_service):
        """Test published is only changed when given."""
        post = await post_service.create_post(
            db, PostCreate(title="Draft", content="Body", is_draft=True)
        )

        unchanged = await post_service.update_post(db, post.id, PostUpdate(title="Draft", content="Body"))
        published = await post_service.update_post(
            db, post.id, PostUpdate(title="Draft", content="Body", published=True)
        )

        assert unchanged.published is False
        assert published.published is True

    async def test_update_missing_returns_none(self, db, post_service):
        """Test updating an unknown id returns None."""
        assert await post_service.update_post(db, 999, PostUpdate(title="Ghost", content="Body")) is None

    async def test_update_requires_text(self, db, post_service):
        """Test title and content are required on update."""
        post = await post_service.create_post(db, PostCreate(title="Keep", content="Body"))

        with pytest.raises(ValidationError):
            await post_service.update_post(db, post.id, PostUpdate(title="", content="Body"))

    async def test_update_to_taken_slug_conflicts(self, db, post_service):
        """Test renaming onto another post's slug conflicts."""
        await post_service.create_post(db, PostCreate(title="Taken", content="Body"))
        post = await post_service.create_post(db, PostCreate(title="Free", content="Body"))

        with pytest.raises(ConflictError):
            await post_service.update_post(db, post.id, PostUpdate(title="taken", content="Body"))


class TestDeletePost:
    """Tests for deleting posts."""

    async def test_delete(self, db, post_service):
        """Test a deleted post can no longer be fetched."""
        post = await post_service.create_post(db, PostCreate(title="Bye", content="Body"))

        assert await post_service.delete_post(db, post.id) is True
        assert await post_service.get_post_by_id(db, post.id) is None

    async def test_delete_missing_returns_false(self, db, post_service):
        """Test deleting an unknown id reports nothing was deleted."""
        assert await post_service.delete_post(db, 999) is False


class TestNormalizeText:
    """Tests for search normalization."""

    def test_strips_accents_and_case(self):
        assert normalize_text("Crème Brûlée") == "creme brulee"

    def test_empty(self):
        assert normalize_text(None) == ""
