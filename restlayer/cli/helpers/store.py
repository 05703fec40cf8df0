from restlayer.components import Context
from restlayer.components import Store
from restlayer.core.context import load_store as _load_store


def load_store(context: Context) -> Store:
    store: Store = context.get('store')
    if store.resources is None:
        _load_store(context)
    return store
