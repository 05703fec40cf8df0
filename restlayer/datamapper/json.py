from restlayer.datamapper.components import DataMapper
from restlayer.formats.json import Json


class JsonMapper(DataMapper):
    """Maps entities from and to JSON strings.

        >>> mapper = JsonMapper(SqlAlchemyMetadata())
        >>> mapper.reverse(employee)
        '{"id":1,"name":"John","dob":"2020-01-02T03:04:05+0000","department_id":null,"department":null,"assets":[]}'

    """

    name = 'json'

    def create_format(self) -> Json:
        return Json(max_depth=self.max_depth)
