"""Tests for staybook.services.users against an in-memory database."""

import unittest
from unittest.mock import MagicMock, patch

from db_support import add_listing, make_session_factory, seed_roles
from staybook.core.config import Settings
from staybook.core.errors import (
    ImageStoreError,
    ImageStoreNotConfiguredError,
    InvalidCredentialsError,
    PasswordConfirmMismatchError,
    PasswordInvalidError,
    RoleNotFoundError,
    TokenParseError,
    UserNotFoundError,
    UsernameExistsError,
    UsernameInvalidError,
)
from staybook.core.security import create_access_token, verify_password, verify_token_subject
from staybook.models import User
from staybook.schemas.user import (
    PasswordChangeRequest,
    ProfileImage,
    UserProfileRequest,
    UserRequest,
)
from staybook.services import users as user_service
from staybook.services.mailer import send_welcome_email

PASSWORD = "secret-pass-1"


def _settings() -> Settings:
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite://",
        DEFAULT_THUMBNAIL_URL="https://img.example.com/default.png",
    )


def _request(username: str = "alice", **kwargs: object) -> UserRequest:
    defaults = {
        "password": PASSWORD,
        "email": f"{username}@example.com",
        "fullname": "Alice Liddell",
        "phone": "0123456789",
    }
    defaults.update(kwargs)
    return UserRequest(username=username, **defaults)


class UserServiceTestCase(unittest.TestCase):
    seed = True

    def setUp(self) -> None:
        self.engine, factory = make_session_factory()
        self.db = factory()
        if self.seed:
            seed_roles(self.db)
        self.notifier = MagicMock()
        self.settings = _settings()

    def tearDown(self) -> None:
        self.db.close()
        self.engine.dispose()

    def register(self, username: str = "alice", **kwargs: object):
        return user_service.register_user(
            self.db, _request(username, **kwargs), notifier=self.notifier, settings=self.settings
        )

    def stored(self, username: str = "alice") -> User:
        self.db.expire_all()
        return self.db.query(User).filter(User.username == username).one()


class TestRegister(UserServiceTestCase):
    def test_new_user_gets_guest_role_and_hashed_password(self) -> None:
        resp = self.register()
        self.assertEqual(resp.username, "alice")
        self.assertEqual(resp.roles, ["GUEST"])
        self.assertEqual(resp.thumbnail_url, "https://img.example.com/default.png")
        self.assertEqual(user_service.count_users(self.db), 1)
        user = self.stored()
        self.assertNotEqual(user.password_hash, PASSWORD)
        self.assertTrue(verify_password(PASSWORD, user.password_hash))

    def test_welcome_email_is_queued_after_persisting(self) -> None:
        self.register()
        self.notifier.submit.assert_called_once_with(
            "welcome-email:alice",
            send_welcome_email,
            self.settings,
            "alice@example.com",
            "Alice Liddell",
        )

    def test_existing_username_fails_without_persistence_or_notification(self) -> None:
        self.register()
        self.notifier.reset_mock()
        with self.assertRaises(UsernameExistsError):
            self.register(email="other@example.com")
        self.assertEqual(user_service.count_users(self.db), 1)
        self.assertEqual(self.stored().email, "alice@example.com")
        self.notifier.submit.assert_not_called()

    def test_unique_constraint_race_surfaces_as_username_exists(self) -> None:
        self.register()
        self.notifier.reset_mock()
        with patch("staybook.services.users._find_user", return_value=None):
            with self.assertRaises(UsernameExistsError):
                self.register()
        self.assertEqual(user_service.count_users(self.db), 1)
        self.notifier.submit.assert_not_called()

    def test_registration_without_notifier_still_succeeds(self) -> None:
        resp = user_service.register_user(self.db, _request(), settings=self.settings)
        self.assertEqual(resp.username, "alice")


class TestRegisterWithoutRoles(UserServiceTestCase):
    seed = False

    def test_missing_guest_role_fails(self) -> None:
        with self.assertRaises(RoleNotFoundError):
            self.register()
        self.assertEqual(user_service.count_users(self.db), 0)
        self.notifier.submit.assert_not_called()


class TestListAndCount(UserServiceTestCase):
    def test_count_increases_with_each_registration(self) -> None:
        self.assertEqual(user_service.count_users(self.db), 0)
        self.register("alice")
        self.register("bob")
        self.assertEqual(user_service.count_users(self.db), 2)

    def test_list_users_in_id_order_without_password(self) -> None:
        self.register("alice")
        self.register("bob")
        users = user_service.list_users(self.db)
        self.assertEqual([u.username for u in users], ["alice", "bob"])
        self.assertNotIn("password_hash", users[0].model_dump())


class TestAuthenticate(UserServiceTestCase):
    def test_valid_credentials_return_token_for_username(self) -> None:
        self.register()
        token = user_service.authenticate(self.db, "alice", PASSWORD)
        self.assertEqual(verify_token_subject(token), "alice")

    def test_wrong_password_fails(self) -> None:
        self.register()
        with self.assertRaises(InvalidCredentialsError):
            user_service.authenticate(self.db, "alice", "not-the-password")

    def test_unknown_user_fails(self) -> None:
        with self.assertRaises(InvalidCredentialsError):
            user_service.authenticate(self.db, "nobody", PASSWORD)


class TestGetProfile(UserServiceTestCase):
    def test_profile_of_token_subject(self) -> None:
        self.register()
        info = user_service.get_profile(self.db, create_access_token("alice", ["GUEST"]))
        self.assertEqual(info.username, "alice")
        self.assertEqual(info.phone, "0123456789")

    def test_subject_without_record_is_user_not_found(self) -> None:
        with self.assertRaises(UserNotFoundError):
            user_service.get_profile(self.db, create_access_token("ghost", ["GUEST"]))

    def test_malformed_token_is_parse_error(self) -> None:
        with self.assertRaises(TokenParseError):
            user_service.get_profile(self.db, "garbage")


class TestFavorites(UserServiceTestCase):
    def test_returns_favorite_listings(self) -> None:
        self.register()
        first = add_listing(self.db, title="Cabin")
        second = add_listing(self.db, title="Loft")
        add_listing(self.db, title="Not a favorite")
        user = self.stored()
        user.favorites = [second, first]
        self.db.commit()

        resp = user_service.get_favorites(self.db, "alice")
        self.assertEqual(resp.user_id, user.id)
        self.assertEqual([f.title for f in resp.favorites], ["Cabin", "Loft"])

    def test_no_favorites_is_empty(self) -> None:
        self.register()
        self.assertEqual(user_service.get_favorites(self.db, "alice").favorites, [])

    def test_unknown_user(self) -> None:
        with self.assertRaises(UserNotFoundError):
            user_service.get_favorites(self.db, "ghost")


class TestUpdateProfile(UserServiceTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.register()

    def test_blank_values_leave_fields_unchanged(self) -> None:
        req = UserProfileRequest(email="", fullname="   ", phone=None)
        info = user_service.update_profile(self.db, req, "alice")
        self.assertEqual(info.email, "alice@example.com")
        self.assertEqual(info.fullname, "Alice Liddell")
        self.assertEqual(info.phone, "0123456789")

    def test_non_blank_values_overwrite_only_those_fields(self) -> None:
        req = UserProfileRequest(email="new@example.com", phone="999")
        info = user_service.update_profile(self.db, req, "alice")
        self.assertEqual(info.email, "new@example.com")
        self.assertEqual(info.phone, "999")
        self.assertEqual(info.fullname, "Alice Liddell")
        user = self.stored()
        self.assertEqual(user.email, "new@example.com")
        self.assertEqual(user.thumbnail_url, "https://img.example.com/default.png")

    def test_thumbnail_is_uploaded_and_url_stored(self) -> None:
        store = MagicMock()
        store.upload.return_value = "https://img.example.com/alice.png"
        image = ProfileImage(filename="alice.png", content_type="image/png", data=b"png")
        info = user_service.update_profile(
            self.db, UserProfileRequest(thumbnail=image), "alice", image_store=store
        )
        store.upload.assert_called_once_with(image)
        self.assertEqual(info.thumbnail_url, "https://img.example.com/alice.png")

    def test_failed_upload_changes_nothing(self) -> None:
        store = MagicMock()
        store.upload.side_effect = ImageStoreError("boom")
        image = ProfileImage(filename="alice.png", content_type="image/png", data=b"png")
        req = UserProfileRequest(email="new@example.com", thumbnail=image)
        with self.assertRaises(ImageStoreError):
            user_service.update_profile(self.db, req, "alice", image_store=store)
        self.assertEqual(self.stored().email, "alice@example.com")

    def test_thumbnail_without_image_store(self) -> None:
        image = ProfileImage(filename="alice.png", content_type="image/png", data=b"png")
        with self.assertRaises(ImageStoreNotConfiguredError):
            user_service.update_profile(self.db, UserProfileRequest(thumbnail=image), "alice")

    def test_unknown_user(self) -> None:
        with self.assertRaises(UserNotFoundError):
            user_service.update_profile(self.db, UserProfileRequest(email="x@example.com"), "ghost")


class TestChangePassword(UserServiceTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.register()
        self.original_hash = self.stored().password_hash

    def _change(self, **kwargs: str):
        fields = {
            "username": "alice",
            "password": PASSWORD,
            "new_password": "brand-new-pass",
            "verify_password": "brand-new-pass",
        }
        fields.update(kwargs)
        return user_service.change_password(self.db, PasswordChangeRequest(**fields))

    def test_success_rehashes(self) -> None:
        self._change()
        user = self.stored()
        self.assertNotEqual(user.password_hash, self.original_hash)
        self.assertTrue(verify_password("brand-new-pass", user.password_hash))
        self.assertFalse(verify_password(PASSWORD, user.password_hash))

    def test_unknown_username(self) -> None:
        with self.assertRaises(UsernameInvalidError):
            self._change(username="ghost")

    def test_wrong_current_password_leaves_hash_unchanged(self) -> None:
        with self.assertRaises(PasswordInvalidError):
            self._change(password="not-my-password")
        self.assertEqual(self.stored().password_hash, self.original_hash)

    def test_confirmation_mismatch_leaves_hash_unchanged(self) -> None:
        with self.assertRaises(PasswordConfirmMismatchError):
            self._change(verify_password="brand-new-pasS")
        self.assertEqual(self.stored().password_hash, self.original_hash)


if __name__ == "__main__":
    unittest.main()
