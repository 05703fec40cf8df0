class NotAvailable:
    """Stands for a value that was not given at all, unlike `None`."""

    __slots__ = ()

    def __repr__(self):
        return 'NA'

    def __bool__(self):
        return False


NA = NotAvailable()
