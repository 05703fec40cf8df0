from restlayer.dispatcher import command


@command()
def load():
    """Load primitive data structures into python-native objects.

    Currently used for:

        load(Context, Store, RawConfig) -> Store

    """


@command()
def reverse():
    """Reverse map a value into a plain, encodable structure.

        reverse(DataMapper, dict, *, seen) -> dict
        reverse(DataMapper, list, *, seen) -> list
        reverse(DataMapper, object, *, seen) -> Any

    `seen` is the set of entity identities currently being expanded.
    """


@command()
def encode():
    """Encode plain data into a wire format string.

        encode(Format, data) -> str

    """


@command()
def decode():
    """Decode a wire format string into plain data.

        decode(Format, str) -> data

    """


@command()
def get_error_context():
    """Get error context for a given object."""
