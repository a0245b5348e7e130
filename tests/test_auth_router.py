from comicapi.services.mail_service import MailPurpose
from conftest import DEFAULT_PASSWORD, auth_headers, create_user


def _register(client, email="writer@example.com"):
    return client.post(
        "/auth/register",
        json={"fullName": "Writer", "email": email, "password": DEFAULT_PASSWORD},
    )


class TestEnvelope:
    def test_success_envelope_shape(self, client):
        res = _register(client)
        assert res.status_code == 200
        body = res.json()
        assert body["success"] is True
        assert body["statusCode"] == 200
        assert set(body["data"]) >= {"accessToken", "refreshToken"}

    def test_validation_error_is_400_with_field_map(self, client):
        res = client.post(
            "/auth/register",
            json={"fullName": "", "email": "not-an-email", "password": "123"},
        )
        assert res.status_code == 400
        body = res.json()
        assert body["success"] is False
        assert body["statusCode"] == 400
        assert {"email", "password", "fullName"} <= set(body["data"])

    def test_protected_route_without_token_is_401(self, client):
        res = client.get("/auth/me")
        assert res.status_code == 401
        body = res.json()
        assert body == {
            "success": False,
            "statusCode": 401,
            "message": "Access denied",
            "data": None,
        }

    def test_garbage_bearer_token_is_401(self, client):
        res = client.get("/auth/me", headers={"Authorization": "Bearer nonsense"})
        assert res.status_code == 401
        assert res.json()["message"] == "Access denied"

    def test_health(self, client):
        res = client.get("/health")
        assert res.status_code == 200
        assert res.json()["data"]["database"] == "ok"


class TestAuthFlow:
    def test_register_login_me(self, client):
        _register(client)
        res = client.post(
            "/auth/login",
            json={"email": "Writer@Example.com", "password": DEFAULT_PASSWORD},
        )
        assert res.status_code == 200
        access = res.json()["data"]["accessToken"]

        me = client.get("/auth/me", headers={"Authorization": f"Bearer {access}"})
        assert me.status_code == 200
        profile = me.json()["data"]
        assert profile["email"] == "writer@example.com"
        assert profile["emailVerified"] is False
        assert "passwordHash" not in profile

    def test_register_never_echoes_code(self, client, mail):
        res = _register(client)
        code = mail.last_code("writer@example.com", MailPurpose.EMAIL_VERIFICATION)
        assert code not in res.text

    def test_duplicate_register_is_409(self, client):
        _register(client)
        res = _register(client, email="WRITER@example.com")
        assert res.status_code == 409
        assert res.json()["success"] is False

    def test_bad_credentials_401(self, client):
        _register(client)
        res = client.post(
            "/auth/login", json={"email": "writer@example.com", "password": "wrong-pass"}
        )
        assert res.status_code == 401

    def test_refetch_token_rotation(self, client):
        refresh = _register(client).json()["data"]["refreshToken"]

        res = client.post("/auth/refetchToken", json={"refreshToken": refresh})
        assert res.status_code == 200
        new_refresh = res.json()["data"]["refreshToken"]
        assert new_refresh != refresh

        replay = client.post("/auth/refetchToken", json={"refreshToken": refresh})
        assert replay.status_code == 401

    def test_logout_then_refresh_fails(self, client):
        tokens = _register(client).json()["data"]
        headers = {"Authorization": f"Bearer {tokens['accessToken']}"}

        for _ in range(2):
            res = client.post(
                "/auth/logout", json={"refreshToken": tokens["refreshToken"]}, headers=headers
            )
            assert res.status_code == 200

        res = client.post("/auth/refetchToken", json={"refreshToken": tokens["refreshToken"]})
        assert res.status_code == 401

    def test_verify_email(self, client, mail):
        _register(client)
        code = mail.last_code("writer@example.com", MailPurpose.EMAIL_VERIFICATION)

        res = client.post("/auth/verify", json={"email": "writer@example.com", "code": code})
        assert res.status_code == 200

        again = client.post("/auth/verify", json={"email": "writer@example.com", "code": code})
        assert again.status_code == 400
        assert again.json()["message"] == "Invalid code"

    def test_malformed_code_is_validation_error(self, client):
        _register(client)
        res = client.post("/auth/verify", json={"email": "writer@example.com", "code": "12ab"})
        assert res.status_code == 400
        assert "code" in res.json()["data"]

    def test_forgot_password_always_ok(self, client, mail):
        res = client.post("/auth/forgot-password", json={"email": "ghost@example.com"})
        assert res.status_code == 200
        assert mail.outbox == []

    def test_forgot_and_reset_password(self, client, mail):
        _register(client)
        client.post("/auth/forgot-password", json={"email": "writer@example.com"})
        code = mail.last_code("writer@example.com", MailPurpose.PASSWORD_RESET)

        res = client.post(
            "/auth/reset-password",
            json={"email": "writer@example.com", "code": code, "newPassword": "changed-pw"},
        )
        assert res.status_code == 200

        login = client.post(
            "/auth/login", json={"email": "writer@example.com", "password": "changed-pw"}
        )
        assert login.status_code == 200

    def test_resend_confirm_unknown_email_400(self, client):
        res = client.post("/auth/resend-confirm", json={"email": "ghost@example.com"})
        assert res.status_code == 400

    def test_resend_confirm_mail_failure_is_500(self, client, mail):
        _register(client)
        mail.fail = True
        res = client.post("/auth/resend-confirm", json={"email": "writer@example.com"})
        assert res.status_code == 500
        assert res.json()["message"] == "Internal server error"

    def test_google_login_and_password_login_refused(self, client):
        res = client.post("/auth/google", json={"email": "fan@example.com", "fullName": "Fan"})
        assert res.status_code == 200

        login = client.post(
            "/auth/login", json={"email": "fan@example.com", "password": "whatever"}
        )
        assert login.status_code == 400
        assert login.json()["message"] == "Use social login"

    def test_update_password(self, client, db, token_service):
        user = create_user(db)
        headers = auth_headers(token_service, user)

        wrong = client.post(
            "/auth/update-password",
            json={"currentPassword": "nope-nope", "newPassword": "changed-pw"},
            headers=headers,
        )
        assert wrong.status_code == 400

        ok = client.post(
            "/auth/update-password",
            json={"currentPassword": DEFAULT_PASSWORD, "newPassword": "changed-pw"},
            headers=headers,
        )
        assert ok.status_code == 200

    def test_me_for_deleted_user_is_404(self, client, db, token_service):
        user = create_user(db)
        headers = auth_headers(token_service, user)
        db.delete(user)
        db.commit()

        res = client.get("/auth/me", headers=headers)
        assert res.status_code == 404
