from tourney.models.db.shared import BaseModelORM
from tourney.utils.id_types import CivilizationId, MapId


class Map(BaseModelORM):
    id: MapId
    name: str


class Civilization(BaseModelORM):
    id: CivilizationId
    name: str
