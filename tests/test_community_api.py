"""
Community API Tests

Tests for templates, comments, bookmarks and notifications.
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

from app.models.category import Category
from app.models.notification import Notification


@pytest_asyncio.fixture
async def alice(make_user, auth_headers):
    user = await make_user(email="alice@devkit.dev", username="alice")
    return {"id": str(user.id), "headers": auth_headers(user)}


@pytest_asyncio.fixture
async def bob(make_user, auth_headers):
    user = await make_user(email="bob@devkit.dev", username="bob")
    return {"id": str(user.id), "headers": auth_headers(user)}


@pytest_asyncio.fixture
async def web_category(db_session):
    category = Category(name="Web", slug="web")
    db_session.add(category)
    await db_session.commit()
    return category


async def create_template(client, owner, name="React Starter", status="published", **extra):
    payload = {"name": name, "content": "npx create-react-app {{projectName}}", "status": status}
    payload.update(extra)
    response = await client.post("/api/v1/templates", json=payload, headers=owner["headers"])
    assert response.status_code == 201, response.text
    return response.json()["template"]


# ==================== Templates ====================

class TestTemplates:
    """Tests for template CRUD and browsing."""

    @pytest.mark.asyncio
    async def test_create(self, client, alice, web_category, db_session):
        template = await create_template(client, alice, category_id=str(web_category.id))

        assert template["creator_id"] == alice["id"]
        assert template["status"] == "published"
        assert template["views_count"] == 0

        await db_session.refresh(web_category)
        assert web_category.template_count == 1

    @pytest.mark.asyncio
    async def test_defaults_to_draft(self, client, alice):
        response = await client.post(
            "/api/v1/templates",
            json={"name": "WIP", "content": "echo wip"},
            headers=alice["headers"],
        )

        assert response.json()["template"]["status"] == "draft"

    @pytest.mark.asyncio
    async def test_duplicate_name_per_creator(self, client, alice, bob):
        await create_template(client, alice)

        response = await client.post(
            "/api/v1/templates",
            json={"name": "React Starter", "content": "echo again"},
            headers=alice["headers"],
        )
        assert response.status_code == 400
        assert response.json() == {"error": "You already have a template with this name"}

        # same name is fine for another creator
        await create_template(client, bob)

    @pytest.mark.asyncio
    async def test_unknown_category(self, client, alice):
        response = await client.post(
            "/api/v1/templates",
            json={"name": "x", "content": "y", "category_id": str(uuid.uuid4())},
            headers=alice["headers"],
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid or inactive category"}

    @pytest.mark.asyncio
    async def test_list_published_only(self, client, alice):
        await create_template(client, alice, name="Public")
        await create_template(client, alice, name="Secret", status="draft")

        response = await client.get("/api/v1/templates")

        assert response.status_code == 200
        body = response.json()
        assert [t["name"] for t in body["templates"]] == ["Public"]
        assert body["pagination"]["total"] == 1

    @pytest.mark.asyncio
    async def test_list_search_and_sort(self, client, alice):
        await create_template(client, alice, name="Vue Starter")
        await create_template(client, alice, name="Django API", description="Python backend")

        response = await client.get("/api/v1/templates", params={"search": "python"})
        assert [t["name"] for t in response.json()["templates"]] == ["Django API"]

        response = await client.get("/api/v1/templates", params={"sort": "name", "order": "asc"})
        assert [t["name"] for t in response.json()["templates"]] == ["Django API", "Vue Starter"]

    @pytest.mark.asyncio
    async def test_search_treats_wildcards_literally(self, client, alice):
        await create_template(client, alice, name="100% Coverage")
        await create_template(client, alice, name="1000 Snippets")
        await create_template(client, alice, name="snake_case tools")
        await create_template(client, alice, name="snakeXcase tools")

        response = await client.get("/api/v1/templates", params={"search": "100%"})
        assert [t["name"] for t in response.json()["templates"]] == ["100% Coverage"]

        response = await client.get("/api/v1/templates", params={"search": "e_c"})
        assert [t["name"] for t in response.json()["templates"]] == ["snake_case tools"]

    @pytest.mark.asyncio
    async def test_views_counted_for_others_only(self, client, alice, bob):
        template = await create_template(client, alice)
        url = f"/api/v1/templates/{template['id']}"

        response = await client.get(url)
        assert response.json()["template"]["views_count"] == 1

        response = await client.get(url, headers=bob["headers"])
        assert response.json()["template"]["views_count"] == 2

        response = await client.get(url, headers=alice["headers"])
        assert response.json()["template"]["views_count"] == 2

    @pytest.mark.asyncio
    async def test_related_templates(self, client, alice):
        main = await create_template(client, alice, name="Main")
        await create_template(client, alice, name="Sibling")
        await create_template(client, alice, name="Unpublished", status="draft")

        response = await client.get(f"/api/v1/templates/{main['id']}")

        assert [t["name"] for t in response.json()["related"]] == ["Sibling"]

    @pytest.mark.asyncio
    async def test_draft_hidden_from_others(self, client, alice, bob):
        draft = await create_template(client, alice, name="WIP", status="draft")
        url = f"/api/v1/templates/{draft['id']}"

        assert (await client.get(url, headers=bob["headers"])).status_code == 404
        assert (await client.get(url)).status_code == 404
        assert (await client.get(url, headers=alice["headers"])).status_code == 200

    @pytest.mark.asyncio
    async def test_update_by_owner(self, client, alice):
        template = await create_template(client, alice)

        response = await client.patch(
            f"/api/v1/templates/{template['id']}",
            json={"description": "Vite + React"},
            headers=alice["headers"],
        )

        assert response.status_code == 200
        updated = response.json()["template"]
        assert updated["description"] == "Vite + React"
        assert updated["name"] == "React Starter"

    @pytest.mark.asyncio
    async def test_update_by_other_user(self, client, alice, bob):
        template = await create_template(client, alice)

        response = await client.patch(
            f"/api/v1/templates/{template['id']}",
            json={"name": "Hijacked"},
            headers=bob["headers"],
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_delete(self, client, alice, bob, web_category, db_session):
        template = await create_template(client, alice, category_id=str(web_category.id))
        url = f"/api/v1/templates/{template['id']}"

        assert (await client.delete(url, headers=bob["headers"])).status_code == 403
        assert (await client.delete(url, headers=alice["headers"])).status_code == 200
        assert (await client.get(url)).status_code == 404

        await db_session.refresh(web_category)
        assert web_category.template_count == 0

    @pytest.mark.asyncio
    async def test_admin_can_delete(self, client, alice, make_user, auth_headers):
        template = await create_template(client, alice)
        admin = await make_user(email="root@devkit.dev", username="root", is_admin=True)

        response = await client.delete(
            f"/api/v1/templates/{template['id']}", headers=auth_headers(admin)
        )

        assert response.status_code == 200


class TestTemplateStats:
    """Tests for PUT /templates/{id}/stats."""

    @pytest.mark.asyncio
    async def test_like_once(self, client, alice, bob):
        template = await create_template(client, alice)
        url = f"/api/v1/templates/{template['id']}/stats"

        response = await client.put(url, json={"activity_type": "like"}, headers=bob["headers"])
        assert response.status_code == 200
        body = response.json()
        assert body["activity_type"] == "like"
        assert body["likes_count"] == 1

        response = await client.put(url, json={"activity_type": "like"}, headers=bob["headers"])
        assert response.status_code == 409
        assert response.json() == {"error": "Template already liked"}

        response = await client.put(url, json={"activity_type": "like"}, headers=alice["headers"])
        assert response.json()["likes_count"] == 2

    @pytest.mark.asyncio
    async def test_copies_feed_popular_sort(self, client, alice, bob):
        await create_template(client, alice, name="Quiet")
        loud = await create_template(client, alice, name="Loud")
        url = f"/api/v1/templates/{loud['id']}/stats"

        for _ in range(2):
            response = await client.put(url, json={"activity_type": "copy"}, headers=bob["headers"])
        assert response.json()["copies_count"] == 2

        response = await client.get("/api/v1/templates", params={"sort": "popular"})
        assert [t["name"] for t in response.json()["templates"]] == ["Loud", "Quiet"]

    @pytest.mark.asyncio
    async def test_views_by_creator_not_counted(self, client, alice, bob):
        template = await create_template(client, alice)
        url = f"/api/v1/templates/{template['id']}/stats"

        await client.put(url, json={"activity_type": "view"}, headers=alice["headers"])
        response = await client.put(url, json={"activity_type": "view"}, headers=bob["headers"])

        assert response.json()["views_count"] == 1

    @pytest.mark.asyncio
    async def test_like_and_copy_notify_creator(self, client, alice, bob):
        template = await create_template(client, alice)
        url = f"/api/v1/templates/{template['id']}/stats"

        await client.put(url, json={"activity_type": "like"}, headers=bob["headers"])
        await client.put(url, json={"activity_type": "copy"}, headers=bob["headers"])
        await client.put(url, json={"activity_type": "view"}, headers=bob["headers"])

        response = await client.get("/api/v1/notifications", headers=alice["headers"])
        body = response.json()
        assert body["unread_count"] == 2
        assert {n["type"] for n in body["notifications"]} == {"template_liked", "template_copied"}
        assert {n["message"] for n in body["notifications"]} == {
            'bob liked your template "React Starter"',
            'bob copied your template "React Starter"',
        }

    @pytest.mark.asyncio
    async def test_others_draft_not_found(self, client, alice, bob):
        draft = await create_template(client, alice, name="WIP", status="draft")

        response = await client.put(
            f"/api/v1/templates/{draft['id']}/stats",
            json={"activity_type": "like"},
            headers=bob["headers"],
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_requires_authentication(self, client, alice):
        template = await create_template(client, alice)

        response = await client.put(
            f"/api/v1/templates/{template['id']}/stats", json={"activity_type": "view"}
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_unknown_activity(self, client, alice, bob):
        template = await create_template(client, alice)

        response = await client.put(
            f"/api/v1/templates/{template['id']}/stats",
            json={"activity_type": "share"},
            headers=bob["headers"],
        )

        assert response.status_code == 400


# ==================== Comments & Notifications ====================

class TestComments:
    """Tests for comments and the notifications they trigger."""

    @pytest.mark.asyncio
    async def test_comment_notifies_creator(self, client, alice, bob):
        template = await create_template(client, alice)

        response = await client.post(
            "/api/v1/comments",
            json={"template_id": template["id"], "comment_text": "  Nice setup!  "},
            headers=bob["headers"],
        )
        assert response.status_code == 201
        assert response.json()["comment_text"] == "Nice setup!"

        response = await client.get("/api/v1/notifications", headers=alice["headers"])
        body = response.json()
        assert body["unread_count"] == 1
        notification = body["notifications"][0]
        assert notification["type"] == "comment"
        assert notification["title"] == "New comment on your template"
        assert notification["message"] == "bob commented on React Starter"
        assert notification["action_url"] == f"/templates/{template['id']}"

        response = await client.get("/api/v1/notifications", headers=bob["headers"])
        assert response.json() == {"notifications": [], "unread_count": 0}

    @pytest.mark.asyncio
    async def test_own_comment_does_not_notify(self, client, alice):
        template = await create_template(client, alice)

        await client.post(
            "/api/v1/comments",
            json={"template_id": template["id"], "comment_text": "Changelog: v2"},
            headers=alice["headers"],
        )

        response = await client.get("/api/v1/notifications", headers=alice["headers"])
        assert response.json()["unread_count"] == 0

    @pytest.mark.asyncio
    async def test_list_comments(self, client, alice, bob):
        template = await create_template(client, alice)
        for text in ("first", "second"):
            await client.post(
                "/api/v1/comments",
                json={"template_id": template["id"], "comment_text": text},
                headers=bob["headers"],
            )

        response = await client.get("/api/v1/comments", params={"template_id": template["id"]})

        body = response.json()
        assert body["pagination"]["total"] == 2
        assert {c["comment_text"] for c in body["comments"]} == {"first", "second"}

    @pytest.mark.asyncio
    async def test_comment_on_missing_template(self, client, bob):
        response = await client.post(
            "/api/v1/comments",
            json={"template_id": str(uuid.uuid4()), "comment_text": "hello?"},
            headers=bob["headers"],
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_comment(self, client, alice, bob):
        template = await create_template(client, alice)
        response = await client.post(
            "/api/v1/comments",
            json={"template_id": template["id"], "comment_text": "mine"},
            headers=bob["headers"],
        )
        url = f"/api/v1/comments/{response.json()['id']}"

        assert (await client.delete(url, headers=alice["headers"])).status_code == 403
        assert (await client.delete(url, headers=bob["headers"])).status_code == 200
        assert (await client.delete(url, headers=bob["headers"])).status_code == 404

    @pytest.mark.asyncio
    async def test_edit_comment(self, client, alice, bob):
        template = await create_template(client, alice)
        response = await client.post(
            "/api/v1/comments",
            json={"template_id": template["id"], "comment_text": "typo hree"},
            headers=bob["headers"],
        )
        url = f"/api/v1/comments/{response.json()['id']}"

        response = await client.patch(url, json={"comment_text": " typo here "}, headers=bob["headers"])
        assert response.status_code == 200
        assert response.json()["comment_text"] == "typo here"

        response = await client.patch(url, json={"comment_text": "edited"}, headers=alice["headers"])
        assert response.status_code == 403
        assert response.json() == {"error": "You can only edit your own comments"}

        listing = await client.get("/api/v1/comments", params={"template_id": template["id"]})
        assert [c["comment_text"] for c in listing.json()["comments"]] == ["typo here"]

    @pytest.mark.asyncio
    async def test_edit_missing_comment(self, client, bob):
        response = await client.patch(
            f"/api/v1/comments/{uuid.uuid4()}", json={"comment_text": "hello"}, headers=bob["headers"]
        )

        assert response.status_code == 404


class TestNotifications:

    @pytest.mark.asyncio
    async def test_mark_read(self, client, alice, bob):
        """Verify marking read counts only notifications that changed."""
        template = await create_template(client, alice)
        await client.post(
            "/api/v1/comments",
            json={"template_id": template["id"], "comment_text": "hi"},
            headers=bob["headers"],
        )
        listing = await client.get("/api/v1/notifications", headers=alice["headers"])
        notification_id = listing.json()["notifications"][0]["id"]

        payload = {"notification_ids": [notification_id]}
        response = await client.put("/api/v1/notifications/read", json=payload, headers=alice["headers"])
        assert response.json()["modified_count"] == 1

        response = await client.put("/api/v1/notifications/read", json=payload, headers=alice["headers"])
        assert response.json()["modified_count"] == 0

        listing = await client.get(
            "/api/v1/notifications", params={"unread_only": True}, headers=alice["headers"]
        )
        assert listing.json() == {"notifications": [], "unread_count": 0}

    @pytest.mark.asyncio
    async def test_cannot_mark_others_notifications(self, client, alice, bob):
        template = await create_template(client, alice)
        await client.post(
            "/api/v1/comments",
            json={"template_id": template["id"], "comment_text": "hi"},
            headers=bob["headers"],
        )
        listing = await client.get("/api/v1/notifications", headers=alice["headers"])
        notification_id = listing.json()["notifications"][0]["id"]

        response = await client.put(
            "/api/v1/notifications/read",
            json={"notification_ids": [notification_id]},
            headers=bob["headers"],
        )

        assert response.json()["modified_count"] == 0

    @pytest.mark.asyncio
    async def test_expired_notifications_hidden(self, client, db_session, alice):
        now = datetime.now(timezone.utc)
        for title, expires_at in (("Old news", now - timedelta(days=1)), ("Fresh", now + timedelta(days=1))):
            db_session.add(
                Notification(
                    user_id=uuid.UUID(alice["id"]),
                    type="system",
                    title=title,
                    message=title,
                    expires_at=expires_at,
                )
            )
        await db_session.commit()

        response = await client.get("/api/v1/notifications", headers=alice["headers"])

        body = response.json()
        assert [n["title"] for n in body["notifications"]] == ["Fresh"]
        assert body["unread_count"] == 1

    @pytest.mark.asyncio
    async def test_empty_id_list_rejected(self, client, alice):
        response = await client.put(
            "/api/v1/notifications/read", json={"notification_ids": []}, headers=alice["headers"]
        )

        assert response.status_code == 400


# ==================== Bookmarks ====================

class TestBookmarks:
    """Tests for saving, opening and removing bookmarks."""

    @pytest.mark.asyncio
    async def test_create_and_duplicate(self, client, alice, bob):
        template = await create_template(client, alice)
        payload = {"template_id": template["id"], "notes": "for the next hackathon"}

        response = await client.post("/api/v1/bookmarks", json=payload, headers=bob["headers"])
        assert response.status_code == 201
        body = response.json()
        assert body["priority"] == "medium"
        assert body["status"] == "active"
        assert body["access_count"] == 0

        response = await client.post("/api/v1/bookmarks", json=payload, headers=bob["headers"])
        assert response.status_code == 409
        assert response.json() == {"error": "Template already bookmarked"}

    @pytest.mark.asyncio
    async def test_missing_template(self, client, bob):
        response = await client.post(
            "/api/v1/bookmarks", json={"template_id": str(uuid.uuid4())}, headers=bob["headers"]
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_cannot_bookmark_others_draft(self, client, alice, bob):
        draft = await create_template(client, alice, name="WIP", status="draft")

        response = await client.post(
            "/api/v1/bookmarks", json={"template_id": draft["id"]}, headers=bob["headers"]
        )
        assert response.status_code == 404

        response = await client.post(
            "/api/v1/bookmarks", json={"template_id": draft["id"]}, headers=alice["headers"]
        )
        assert response.status_code == 201

    @pytest.mark.asyncio
    async def test_update(self, client, alice, bob):
        """Verify edits apply and archived bookmarks move to the archived listing."""
        template = await create_template(client, alice)
        created = await client.post(
            "/api/v1/bookmarks",
            json={"template_id": template["id"], "notes": "later"},
            headers=bob["headers"],
        )
        url = f"/api/v1/bookmarks/{created.json()['id']}"

        response = await client.put(
            url,
            json={"priority": "high", "status": "archived", "is_private": False, "notes": None},
            headers=bob["headers"],
        )
        assert response.status_code == 200
        body = response.json()
        assert body["priority"] == "high"
        assert body["status"] == "archived"
        assert body["is_private"] is False
        assert body["notes"] is None

        response = await client.get("/api/v1/bookmarks", headers=bob["headers"])
        assert response.json()["total"] == 0

        response = await client.get(
            "/api/v1/bookmarks", params={"status": "archived"}, headers=bob["headers"]
        )
        assert [b["template_id"] for b in response.json()["bookmarks"]] == [template["id"]]

    @pytest.mark.asyncio
    async def test_update_others_bookmark(self, client, alice, bob):
        template = await create_template(client, alice)
        created = await client.post(
            "/api/v1/bookmarks", json={"template_id": template["id"]}, headers=bob["headers"]
        )

        response = await client.put(
            f"/api/v1/bookmarks/{created.json()['id']}",
            json={"priority": "low"},
            headers=alice["headers"],
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_open_records_access(self, client, alice, bob):
        template = await create_template(client, alice)
        created = await client.post(
            "/api/v1/bookmarks", json={"template_id": template["id"]}, headers=bob["headers"]
        )
        url = f"/api/v1/bookmarks/{created.json()['id']}"

        await client.get(url, headers=bob["headers"])
        response = await client.get(url, headers=bob["headers"])

        assert response.json()["access_count"] == 2
        assert response.json()["last_accessed_at"] is not None

    @pytest.mark.asyncio
    async def test_other_users_bookmark_is_not_found(self, client, alice, bob):
        template = await create_template(client, alice)
        created = await client.post(
            "/api/v1/bookmarks", json={"template_id": template["id"]}, headers=bob["headers"]
        )
        url = f"/api/v1/bookmarks/{created.json()['id']}"

        assert (await client.get(url, headers=alice["headers"])).status_code == 404
        assert (await client.delete(url, headers=alice["headers"])).status_code == 404

    @pytest.mark.asyncio
    async def test_list_sorted_by_priority(self, client, alice, bob):
        low = await create_template(client, alice, name="Low")
        high = await create_template(client, alice, name="High")
        medium = await create_template(client, alice, name="Medium")
        for template, priority in ((low, "low"), (high, "high"), (medium, "medium")):
            await client.post(
                "/api/v1/bookmarks",
                json={"template_id": template["id"], "priority": priority},
                headers=bob["headers"],
            )

        response = await client.get(
            "/api/v1/bookmarks", params={"sort": "priority"}, headers=bob["headers"]
        )

        body = response.json()
        assert body["total"] == 3
        assert [b["template_id"] for b in body["bookmarks"]] == [high["id"], medium["id"], low["id"]]

        response = await client.get(
            "/api/v1/bookmarks", params={"priority": "high"}, headers=bob["headers"]
        )
        assert [b["template_id"] for b in response.json()["bookmarks"]] == [high["id"]]

    @pytest.mark.asyncio
    async def test_delete(self, client, alice, bob):
        template = await create_template(client, alice)
        created = await client.post(
            "/api/v1/bookmarks", json={"template_id": template["id"]}, headers=bob["headers"]
        )
        url = f"/api/v1/bookmarks/{created.json()['id']}"

        response = await client.delete(url, headers=bob["headers"])
        assert response.json() == {"message": "Bookmark removed successfully"}

        assert (await client.get(url, headers=bob["headers"])).status_code == 404
