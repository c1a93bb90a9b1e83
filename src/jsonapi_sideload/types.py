import typing

MutableJSONObject = typing.MutableMapping[str, typing.Any]

RawParams = typing.Mapping[str, typing.Union[str, typing.Sequence[str], None]]
SerializedRecord = typing.Dict[str, typing.Any]
