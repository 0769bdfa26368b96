import itertools

import pytest
from flask_jwt_extended import create_access_token

from leqet import create_app
from leqet.extensions import db
from leqet.models import User, TrainerAssignment, NutritionistAssignment

DEFAULT_PASSWORD = "secret123"


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        db.create_all()
        try:
            yield app
        finally:
            db.session.remove()
            db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    counter = itertools.count(1)

    def _make_user(role="member", email=None, password=DEFAULT_PASSWORD, status="active",
                   full_name=None, trainer=None, nutritionist=None):
        n = next(counter)
        user = User(
            email=email or f"{role}{n}@leqet.test",
            full_name=full_name or f"{role.title()} {n}",
            role=role,
            status=status,
        )
        if password:
            user.set_password(password)
        db.session.add(user)
        db.session.flush()
        if trainer is not None:
            db.session.add(TrainerAssignment(member_id=user.id, trainer_id=trainer.id))
        if nutritionist is not None:
            db.session.add(NutritionistAssignment(member_id=user.id, nutritionist_id=nutritionist.id))
        db.session.commit()
        return user

    return _make_user


@pytest.fixture
def trainer(make_user):
    return make_user("trainer")


@pytest.fixture
def nutritionist(make_user):
    return make_user("nutritionist")


@pytest.fixture
def admin(make_user):
    return make_user("admin")


@pytest.fixture
def member(make_user, trainer, nutritionist):
    """A member assigned to the ``trainer`` and ``nutritionist`` fixtures."""
    return make_user("member", trainer=trainer, nutritionist=nutritionist)


@pytest.fixture
def auth_headers(app):
    def _auth_headers(user):
        token = create_access_token(identity=str(user.id), additional_claims={"role": user.role})
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers
