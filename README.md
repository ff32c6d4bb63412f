# newsgrouper

newsgrouper is a background service that reads unparsed news items from a
PostgreSQL `feed` table. It fetches a text embedding for each item from a
remote embedding API. Each item then goes into the first group whose
centroid it matches, or starts a new group. Membership, the group's newest
item, its `is_rt` flag and its centroid embedding are written back to the
database, and handled items are marked as parsed.

A group's `is_rt` flag is set as soon as any item's text contains one of
the words listed in the `rt_words` table.

## Installing

```
pip install .
```

The database is reached through SQLAlchemy's `postgresql` dialect. The
DBAPI driver that dialect needs is not installed with the package, so
install it yourself.

For running the tests:

```
pip install ".[test]"
pytest
```

## Running

```
newsgrouper
```

The command runs until it is stopped. Each round processes all unparsed
feed items, and the next round starts 30 seconds after the previous one
ends. An error in a round is logged and the loop goes on. After each round,
groups whose newest item is more than an hour old are dropped from memory,
unless `NO_DELETE_OLD_GROUPS` is set.

A new item matches a group when two tests pass. Its cosine similarity to
the group centroid must reach a threshold. That threshold starts from
`DIFF`, grows with the group size, and is at least 0.75, or at least 0.95
once the group has three or more items. Its Euclidean distance to the
centroid must also reach a second threshold, which starts from `DISTANCE`
and grows with the group size.

### Environment

| Variable | Meaning | Default |
| --- | --- | --- |
| `DIFF` | base cosine-similarity threshold, in percent (0–100) | 85 |
| `DISTANCE` | base Euclidean-distance threshold, in percent (0–100) | 20 |
| `ALPHA` | value in percent (0–100) stored with each group | 20 |
| `MAX_REQUESTS` | concurrent embedding requests and database pool size | 10 |
| `NO_DELETE_OLD_GROUPS` | `true` to keep groups past their one-hour lifetime | false |
| `ACCEPT_OLD_GROUPS` | read and kept on the maker; it does not change grouping | false |
| `DB_LOGIN`, `DB_PASSWORD`, `DB_HOST`, `DB_PORT` | PostgreSQL connection (database `newagregator`) | — |
| `REDIS_ADDR`, `REDIS_PASSWORD` | Redis connection as `host:port` | `localhost:6379` |
| `YANDEX_TOKEN` | API key for the embedding service | — |

A percentage that is missing, not an integer, or outside 0–100 falls back
to its default. `ALPHA` is only stored and serialised with each group. It
takes no part in the matching.

If the database or Redis cannot be reached at start-up, the error is
logged. Without a database every round fails and logs the failure. Without
Redis, new groups are not cached.

### Redis

Each new group is serialised with `Group.to_json()` and stored for 48 hours
under a key `news:<uuid>`. `NewsCache.save_many_news()` stores raw items
under keys `news::<uuid>`. On start-up the maker restores groups from the
values under `news::*`, which are the keys `save_many_news()` writes.

## Using it as a library

The building blocks can also be used on their own:

```python
from newsgrouper.vector import Vector

a = Vector([1.0, 0.0])
b = Vector([1.0, 1.0])
print(a.cos_distance(b))        # 0.7071...
print(a.euclidean_distance(b))  # 1.0
print(a.to_pq_string())         # [1,0]
```

- `newsgrouper.vector.Vector`: a mutable float vector. Its arithmetic
  methods (`add`, `subtract`, `multiply`, `divide`, `normalize`) work in
  place and return the vector. Its distance methods are `cos_distance`,
  `minkowski_distance`, `manhattan_distance`, `euclidean_distance` and
  `chebyshev_distance`.
- `newsgrouper.feed.FeedItem`: one row of the `feed` table.
- `newsgrouper.group.Group`: one story cluster. It works with any objects
  that provide the `Vectorizer` and `GroupStore` protocols, so it can be
  used without a database. It can be saved with `to_json()` and restored
  with `Group.from_json()`.
- `newsgrouper.embedding.EmbeddingService`: the embedding API client.
  `build_text()` composes and shortens the text it sends.
- `newsgrouper.db.Database`: the SQL queries. `newsgrouper.cache.NewsCache`:
  the Redis cache.
- `newsgrouper.maker.GroupMaker`: one processing pass with
  `update_groups()`. `GroupMaker.from_env()` wires it from the environment.
- `newsgrouper.app.App`: repeats that pass. `run_once()` runs one round and
  `run()` runs rounds forever.

## What it does not do

The package does not create or migrate the database schema. The `feed`,
`groups`, `compares` and `rt_words` tables must already exist. It offers no
HTTP or other interface for reading the groups back. They are available
only in the database, in Redis and through `GroupMaker.groups()`.