from databases import Database

from tourney.config import config

database = Database(str(config.pg_dsn))
