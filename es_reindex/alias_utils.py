# alias_utils.py
from es_reindex.config import logger
from es_reindex.models import AliasBinding


async def collect_aliases(store, index, extra_alias=None):
    """
    Aliases currently bound to ``index``, plus ``extra_alias`` when it is
    given and not already among them. Sorted for stable logging.
    """
    aliases = set(await store.get_aliases(index))
    if extra_alias:
        aliases.add(extra_alias)
    return sorted(aliases)


async def cut_over_aliases(store, old_index, new_index, aliases):
    """
    Move every alias from old_index to new_index in ONE update request.

    Removing and adding in separate requests would leave a window where the
    alias resolves to neither index.

    :param store: DocumentStore to run the swap against.
    :param old_index: Index the aliases currently point at.
    :param new_index: Index the aliases should point at afterwards.
    :param aliases: Alias names to move.
    :return: WriteResult of the swap request.
    """
    remove = [AliasBinding(alias, old_index) for alias in aliases]
    add = [AliasBinding(alias, new_index) for alias in aliases]
    result = await store.swap_aliases(remove, add)
    if result.ok:
        logger.info("🔗 Moved aliases %s from '%s' to '%s'", list(aliases), old_index, new_index)
    else:
        logger.error("❗ Error moving aliases %s from '%s' to '%s': %s",
                     list(aliases), old_index, new_index, result.error)
    return result
