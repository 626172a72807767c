# tests/unit/uow/test_sqlalchemy_uow.py
import pytest

from learnhub.models.user import User
from learnhub.uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork


def test_rw_commits_on_clean_exit(session):
    with SQLAlchemyUnitOfWork() as uow:
        uow.users.add(User(email="rw@example.com", name="RW", roles=[]))

    assert SQLAlchemyUnitOfWork().users.exists_by_email("rw@example.com")


def test_rw_rolls_back_on_error(session):
    with pytest.raises(RuntimeError):
        with SQLAlchemyUnitOfWork() as uow:
            uow.users.add(User(email="gone@example.com", name="G", roles=[]))
            raise RuntimeError("abort")

    with SQLAlchemyReadOnlyUnitOfWork() as ro:
        assert ro.users.get_by_email("gone@example.com") is None


def test_read_only_blocks_flush(session):
    with pytest.raises(RuntimeError, match="flush blocked"):
        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            uow.users.add(User(email="ro@example.com", name="RO", roles=[]))

    with SQLAlchemyReadOnlyUnitOfWork() as ro:
        assert ro.users.get_by_email("ro@example.com") is None


def test_read_only_refuses_commit(session):
    with SQLAlchemyReadOnlyUnitOfWork() as uow:
        with pytest.raises(RuntimeError):
            uow.commit()


def test_guard_is_removed_after_exit(session):
    with SQLAlchemyReadOnlyUnitOfWork():
        pass

    with SQLAlchemyUnitOfWork() as uow:
        uow.users.add(User(email="after@example.com", name="A", roles=[]))

    with SQLAlchemyReadOnlyUnitOfWork() as ro:
        assert ro.users.exists_by_email("after@example.com")
