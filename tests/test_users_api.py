import os

from app.core.exceptions import FileUploadError
from app.services.file_service import FileService
from conftest import PASSWORD, auth_headers, login, signup


class TestSignup:

    def test_signup_created(self, client):
        response = signup(client, "gomsu1045", living_town="Newcastle Upon Tyne")
        body = response.json()
        assert body["user_id"] == "gomsu1045"
        assert body["living_town"] == "Newcastle Upon Tyne"
        assert "password" not in body

    def test_signup_duplicate(self, client):
        signup(client, "gomsu1045")
        response = client.post(
            "/users/signup",
            json={"user_id": "gomsu1045", "password": PASSWORD, "email": "other@test.com"},
        )
        assert response.status_code == 409

    def test_signup_validation(self, client):
        response = client.post(
            "/users/signup",
            json={"user_id": "a|b", "password": "short", "email": "not-an-email"},
        )
        assert response.status_code == 422

    def test_id_check(self, client):
        assert client.get("/users/idcheck", params={"user_id": "gomsu1045"}).status_code == 200
        signup(client, "gomsu1045")
        assert client.get("/users/idcheck", params={"user_id": "gomsu1045"}).status_code == 409


class TestLogin:

    def test_login_logout_login(self, client):
        signup(client, "gomsu1045")

        first = login(client, "gomsu1045")
        assert first.status_code == 200
        t1 = first.json()["access_token"]
        assert first.json()["token_type"] == "bearer"

        assert login(client, "gomsu1045").status_code == 401

        assert client.get("/users/logout", headers=auth_headers(t1)).status_code == 204

        second = login(client, "gomsu1045")
        assert second.status_code == 200
        assert second.json()["access_token"] != t1

    def test_wrong_password(self, client):
        signup(client, "gomsu1045")
        assert login(client, "gomsu1045", password="wrong-password").status_code == 404

    def test_unknown_user(self, client):
        assert login(client, "nobody").status_code == 404

    def test_wrong_password_keeps_existing_session(self, client):
        signup(client, "gomsu1045")
        token = login(client, "gomsu1045").json()["access_token"]

        assert login(client, "gomsu1045", password="wrong-password").status_code == 404
        assert client.get("/users/me", headers=auth_headers(token)).status_code == 200

    def test_logout_without_session(self, client):
        assert client.get("/users/logout").status_code == 204
        assert client.get("/users/logout", headers=auth_headers("garbage")).status_code == 204


class TestAccount:

    def test_me(self, client, logged_in):
        headers = logged_in("gomsu1045")
        response = client.get("/users/me", headers=headers)
        assert response.status_code == 200
        assert response.json()["user_id"] == "gomsu1045"

    def test_password_change_ends_session(self, client, logged_in):
        headers = logged_in("gomsu1045")

        response = client.put("/users/account/password", json={"new_password": "N3w-password!"}, headers=headers)
        assert response.status_code == 200
        assert client.get("/users/me", headers=headers).status_code == 401

        assert login(client, "gomsu1045").status_code == 404
        assert login(client, "gomsu1045", password="N3w-password!").status_code == 200

    def test_password_change_needs_login(self, client):
        response = client.put("/users/account/password", json={"new_password": "N3w-password!"})
        assert response.status_code == 401

    def test_profile_update_replaces_image(self, client, logged_in):
        headers = logged_in("gomsu1045")

        first = client.put(
            "/users/account",
            headers=headers,
            files={"profile_image": ("me.png", b"first", "image/png")},
            data={"about_me": "Hello, I'd love to make great friends here"},
        )
        assert first.status_code == 200
        assert first.json()["profile_image_name"] == "me.png"
        assert first.json()["about_me"] == "Hello, I'd love to make great friends here"

        second = client.put(
            "/users/account",
            headers=headers,
            files={"profile_image": ("me2.png", b"second", "image/png")},
            data={"living_town": "Seoul"},
        )
        assert second.status_code == 200
        assert second.json()["profile_image_name"] == "me2.png"
        # fields not sent are kept
        assert second.json()["about_me"] == "Hello, I'd love to make great friends here"

        folder = os.path.join(os.environ["UPLOAD_DIR"], "gomsu1045")
        stored = os.listdir(folder)
        assert len(stored) == 1
        assert stored[0].endswith("_me2.png")

    def test_failed_upload_keeps_old_image(self, client, logged_in, monkeypatch):
        headers = logged_in("keeper01")
        first = client.put(
            "/users/account",
            headers=headers,
            files={"profile_image": ("keep.png", b"first", "image/png")},
        )
        assert first.status_code == 200

        def disk_full(self, upload, owner_id):
            raise FileUploadError("could not store the uploaded file")

        monkeypatch.setattr(FileService, "upload_file", disk_full)
        failed = client.put(
            "/users/account",
            headers=headers,
            files={"profile_image": ("lost.png", b"second", "image/png")},
            data={"living_town": "Seoul"},
        )
        assert failed.status_code == 400

        me = client.get("/users/me", headers=headers).json()
        assert me["profile_image_name"] == "keep.png"
        assert me["living_town"] is None

        folder = os.path.join(os.environ["UPLOAD_DIR"], "keeper01")
        assert [name for name in os.listdir(folder) if name.endswith("_keep.png")]


class TestHealth:

    def test_root(self, client):
        assert client.get("/").status_code == 200
