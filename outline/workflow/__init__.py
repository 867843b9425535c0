"""Operations on the item tree: status, hierarchy, metadata and the editability guard."""
