# notifysvc

A small SMS notification service. Clients submit SMS requests over an HTTP
API; each request is stored with status `Pending`, published as an
`SMS_REQUEST` event and then picked up by a background worker. The worker
checks the recipient against a blacklist, hands the message to the SMS
gateway and records the outcome.

## Modules

- `notifysvc.models`: dataclasses for configuration (`AppConfig` with
  `KafkaSettings`, `RedisSettings`, `ScyllaSettings`; `AppConfig.from_mapping`),
  the stored record `SMSRequest` (`to_dict`), queue events `KafkaPayload` and
  `SendSmsPayload` (`to_json` / `from_json`) and API requests `SendSms` and
  `AddToBlacklist` (`from_dict`, raising `ValueError` on a malformed body).
- `notifysvc.config`: `load_app_config(config_dir="configs",
  env_path="cmd/.env", environ=None)` reads the configuration. Raises
  `ConfigError` if the file is missing, unreadable or cannot be decoded.
- `notifysvc.logging_utils`: loggers carrying fixed fields (`component_logger`,
  `operation_logger`, `request_logger`, `database_logger`, `kafka_logger`,
  `log_with_context`) and the current trace id (`trace_context`,
  `get_trace_id`). All log through the standard `logging` logger named
  `notifysvc`, with the fields passed as `extra`.
- `notifysvc.middleware`: `check_authorization(header)` (raises `AuthError`,
  status 401) and `new_trace_id()`.
- `notifysvc.redis_dao.RedisDao`: the blacklist, kept as the Redis set
  `blacklisted_numbers_set`. Failures raise `DaoError`.
- `notifysvc.scylla_dao.ScyllaDao`: storage of SMS requests in the
  `sms_requests` table. A missing row raises `RecordNotFound`.
- `notifysvc.kafka_dao.KafkaDao`: publishes events to the
  `notification.send_sms` topic and consumes them (`produce`,
  `handle_message`, `consume`).
- `notifysvc.service.NotificationService`: the business logic behind the API
  and the worker. Failures raise `ServiceError`.
- `notifysvc.web.create_app(service, kafka_dao=None)`: the Flask application.
- `notifysvc.app.new_app(...)`: wires everything together and returns an
  `Application` with `start_consumer()` and `run(host="0.0.0.0", port=3333)`.

## Configuration

`load_app_config` looks for `app_config.yaml` (or `app_config.yml`) in the
configuration directory. Key names match case-insensitively, with or without
underscores:

```yaml
kafka:
  bootstrapservers: localhost:9092
  groupid: notification-service
  autooffsetreset: earliest
redis:
  addr: localhost:6379
  db: 0
  pwd: password
scylla:
  hosts: localhost
  keyspace: notifications
```

If the `.env` file exists, its entries are merged in; dotted keys such as
`redis.addr=localhost:6380` set nested values. Then every key already present
can be overridden from the environment by its dotted path in upper case, for
example `REDIS.ADDR`. Pass `environ` to use a mapping other than `os.environ`.

## Running the service

The package does not open store or queue connections itself; pass in clients
you have already built:

```python
from notifysvc.config import load_app_config
from notifysvc.app import new_app

app_config = load_app_config()
application = new_app(app_config, redis_client, scylla_session, producer, consumer)
application.run("0.0.0.0", 3333)  # starts the background worker, then serves HTTP
```

The objects must offer:

- `redis_client`: `sadd`, `sismember`, `smembers`, `srem` taking the set name
  and a value (the interface of a `redis-py` client).
- `scylla_session`: `execute(query, params)` with `%(name)s` placeholders,
  returning rows as mappings or objects with column attributes.
- `producer`: `produce(topic, value)`.
- `consumer`: `subscribe(topics)`, `read_message()` returning the message
  bytes (raising on a read error) and `close()`.

`new_app` raises `ValueError` if `producer` or `consumer` is `None`.
`start_consumer()` may be called more than once; it starts a single daemon
thread.

## HTTP API

`GET /health` answers `{"system": "up"}` without authentication.

Every route under `/v1` needs an `Authorization: Bearer <token>` header. The
expected token is read from the `NOTIFYSVC_AUTH_TOKEN` environment variable
and defaults to `password`. Successful responses carry an `X-Trace-Id` header;
the same id appears in the logs of that request.

| Method | Path                     | Body                                | Purpose                                      |
|--------|--------------------------|-------------------------------------|----------------------------------------------|
| POST   | `/v1/sms/send`           | `{"phone_number": …, "message": …}` | store and queue an SMS, returns `request_id` |
| GET    | `/v1/sms/<request_id>`   |                                     | status and details of a stored SMS           |
| GET    | `/v1/blacklist`          |                                     | all blacklisted numbers                      |
| POST   | `/v1/blacklist`          | `{"phone_numbers": …}`              | add a number to the blacklist                |
| DELETE | `/v1/blacklist/<number>` |                                     | remove a number from the blacklist           |

A malformed body is answered with status 400 and
`{"message": "Invalid Request Body"}`; a service failure with 400 and
`{"ERROR": …}`; a missing or wrong token with 401 and `{"error": …}`. If
the event cannot be published, `/v1/sms/send` answers 500.

## Message flow

1. `POST /v1/sms/send` stores the request with status `Pending` and publishes
   an `SMS_REQUEST` event carrying its `message_id`.
2. The worker reads the event and calls
   `NotificationService.handle_kafka_message`.
3. A blacklisted recipient is skipped. Otherwise the message is written by
   `send_message` to standard output (or the stream given to the service) and
   the stored record is updated: a blank status becomes `Success`, blank
   failure fields become `null`.

## What it does not do

- It has no command-line entry point; start it from Python as shown above.
- It creates no Redis, Scylla or Kafka connections and no database schema;
  the `sms_requests` table must exist and the clients must be supplied.
- The SMS gateway only prints the message; nothing is sent to a real carrier.