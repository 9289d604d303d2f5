import io
import uuid

import pytest

from notifysvc.models import AddToBlacklist, SendSms, SMSRequest
from notifysvc.service import NotificationService, ServiceError


class FakeRedisDao:
    def __init__(self, numbers=(), fail=False):
        self.numbers = set(numbers)
        self.fail = fail

    def _check(self):
        if self.fail:
            raise RuntimeError("store down")

    def add_number_to_blacklist(self, number):
        self._check()
        self.numbers.add(number)

    def is_number_blacklisted(self, number):
        self._check()
        return number in self.numbers

    def get_all_blacklisted_numbers(self):
        self._check()
        return sorted(self.numbers)

    def remove_from_blacklist(self, number):
        self._check()
        if number in self.numbers:
            self.numbers.remove(number)
            return 1
        return 0


class FakeScyllaDao:
    def __init__(self, fail_insert=False, fail_update=False):
        self.rows = {}
        self.updates = []
        self.fail_insert = fail_insert
        self.fail_update = fail_update

    def insert_sms_request(self, entry):
        if self.fail_insert:
            raise RuntimeError("insert failed")
        self.rows[entry.request_id] = SMSRequest(
            id=entry.request_id,
            phone_number=entry.phone_number,
            message=entry.message,
            status="Pending",
        )

    def get_sms_details(self, request_id):
        if request_id not in self.rows:
            raise LookupError(request_id)
        return self.rows[request_id]

    def update_sms_details(self, details):
        if self.fail_update:
            raise RuntimeError("update failed")
        self.updates.append(details)


def make_service(redis=None, scylla=None):
    out = io.StringIO()
    service = NotificationService(redis or FakeRedisDao(), scylla or FakeScyllaDao(), output=out)
    return service, out


def test_send_sms_stores_pending_entry_and_returns_uuid():
    service, _ = make_service()
    request_id = service.send_sms(SendSms(phone_number="num-1", message="hello"))
    assert str(uuid.UUID(request_id)) == request_id
    stored = service.scylla_dao.rows[request_id]
    assert stored.phone_number == "num-1"
    assert stored.message == "hello"


def test_send_sms_ids_are_unique():
    service, _ = make_service()
    first = service.send_sms(SendSms(phone_number="num-1", message="a"))
    second = service.send_sms(SendSms(phone_number="num-1", message="a"))
    assert first != second
    assert len(service.scylla_dao.rows) == 2


def test_send_sms_insert_failure_raises():
    service, _ = make_service(scylla=FakeScyllaDao(fail_insert=True))
    with pytest.raises(ServiceError, match="insert failed"):
        service.send_sms(SendSms(phone_number="num-1", message="a"))


def test_handle_message_sends_and_updates():
    service, out = make_service()
    request_id = service.send_sms(SendSms(phone_number="num-1", message="hi there"))
    assert service.handle_kafka_message(request_id) is True
    assert out.getvalue() == f"RequestID: {request_id} | PhoneNumber: num-1 | Message: hi there\n"
    assert [d.id for d in service.scylla_dao.updates] == [request_id]


def test_handle_message_blacklisted_number_is_not_sent():
    service, out = make_service(redis=FakeRedisDao(["num-1"]))
    request_id = service.send_sms(SendSms(phone_number="num-1", message="hi"))
    assert service.handle_kafka_message(request_id) is False
    assert out.getvalue() == ""
    assert service.scylla_dao.updates == []


def test_handle_message_missing_record_is_swallowed():
    service, out = make_service()
    assert service.handle_kafka_message("missing") is False
    assert out.getvalue() == ""


def test_handle_message_blacklist_failure_is_swallowed():
    service, out = make_service(redis=FakeRedisDao(fail=True))
    request_id = service.send_sms(SendSms(phone_number="num-1", message="hi"))
    assert service.handle_kafka_message(request_id) is False
    assert out.getvalue() == ""


def test_handle_message_update_failure_raises():
    service, out = make_service(scylla=FakeScyllaDao(fail_update=True))
    request_id = service.send_sms(SendSms(phone_number="num-1", message="hi"))
    with pytest.raises(RuntimeError, match="update failed"):
        service.handle_kafka_message(request_id)
    assert request_id in out.getvalue()


def test_get_sms_returns_record():
    service, _ = make_service()
    request_id = service.send_sms(SendSms(phone_number="num-2", message="body"))
    details = service.get_sms(request_id)
    assert details.id == request_id
    assert details.status == "Pending"


def test_get_sms_missing_raises():
    service, _ = make_service()
    with pytest.raises(ServiceError) as info:
        service.get_sms("abc")
    assert str(info.value) == "failed to retrieve SMS details for request ID abc"


def test_blacklist_add_list_remove_round_trip():
    service, _ = make_service()
    service.add_to_blacklist(AddToBlacklist(phone_numbers="num-1"))
    service.add_to_blacklist(AddToBlacklist(phone_numbers="num-2"))
    assert service.get_blacklist() == ["num-1", "num-2"]
    assert service.remove_from_blacklist("num-1") is True
    assert service.remove_from_blacklist("num-1") is False
    assert service.get_blacklist() == ["num-2"]


def test_blacklist_errors_raise_service_error():
    service, _ = make_service(redis=FakeRedisDao(fail=True))
    with pytest.raises(ServiceError) as add_info:
        service.add_to_blacklist(AddToBlacklist(phone_numbers="num-1"))
    assert str(add_info.value) == "failed to add number num-1 to blacklist"
    with pytest.raises(ServiceError) as remove_info:
        service.remove_from_blacklist("num-1")
    assert str(remove_info.value) == "failed to remove number num-1 from blacklist"
    with pytest.raises(ServiceError, match="failed to retrieve blacklisted numbers"):
        service.get_blacklist()