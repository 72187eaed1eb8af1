"""
Streamlit user interface for the research tracker.

A single page lets the user log biomedical research references: a
search bar and category filter at the top, the entry form with its
tag input, the two export buttons and finally the list of entries
matching the current search.  Entries are kept in a local database
slot so they survive between sessions.

Widget values live in ``st.session_state`` under ``draft_<field>``
keys.  They are copied into the :class:`EntryForm` draft as each
widget changes and once more on submit, and cleared by the submit
callback once the entry has been stored.
"""

from __future__ import annotations

import logging
import os
from typing import List

import pandas as pd  # type: ignore
import streamlit as st  # type: ignore

from research_tracker.backend import exporters, filtering, parsers
from research_tracker.backend.database import SlotStorage
from research_tracker.backend.form import EntryForm
from research_tracker.backend.models import CATEGORIES, DRAFT_FIELDS, EVIDENCE_LEVELS, Entry
from research_tracker.backend.store import EntryStore


def _reset_session() -> None:
    """Initialise default values in the Streamlit session state.

    The store is created and loaded once per browser session; the
    remaining keys back the search bar, the form widgets and flash
    messages.
    """
    if "store" not in st.session_state:
        store = EntryStore(SlotStorage())
        store.load()
        st.session_state.store = store
        st.session_state.form = EntryForm(store)
    state_defaults = {
        "search_term": "",
        "filter_category": "",
        "tag_input": "",
        "flash": None,
    }
    for name in DRAFT_FIELDS:
        state_defaults[f"draft_{name}"] = ""
    for key, default in state_defaults.items():
        if key not in st.session_state:
            st.session_state[key] = default


def _commit_tag() -> None:
    """Add the tag input as a tag when the user presses Enter."""
    form: EntryForm = st.session_state.form
    if form.add_tag(st.session_state.tag_input):
        st.session_state.tag_input = ""


def _sync_field(name: str) -> None:
    """Copy one form widget into the draft as soon as it changes."""
    st.session_state.form.set_field(name, st.session_state[f"draft_{name}"])


def _submit_entry() -> None:
    """Copy the widgets into the draft and submit it."""
    form: EntryForm = st.session_state.form
    for name in DRAFT_FIELDS:
        form.set_field(name, st.session_state[f"draft_{name}"])
    entry = form.submit()
    if entry is None:
        return
    for name in DRAFT_FIELDS:
        st.session_state[f"draft_{name}"] = ""
    st.session_state.tag_input = ""
    st.session_state.flash = f"Entrée ajoutée : {entry.title}"


def show_search_bar() -> None:
    col1, col2 = st.columns([3, 1])
    with col1:
        st.text_input("Rechercher", key="search_term", placeholder="Rechercher...")
    with col2:
        st.selectbox(
            "Catégorie",
            options=["", *CATEGORIES],
            key="filter_category",
            format_func=lambda value: value or "Toutes catégories",
        )


def show_entry_form() -> None:
    """Display the draft entry form and its tag list."""
    form: EntryForm = st.session_state.form
    st.text_input("Titre", key="draft_title", placeholder="Titre de la recherche",
                  on_change=_sync_field, args=("title",))
    st.text_input("URL", key="draft_url", placeholder="URL de la source",
                  on_change=_sync_field, args=("url",))
    st.selectbox(
        "Catégorie de la recherche",
        options=["", *CATEGORIES],
        key="draft_category",
        on_change=_sync_field,
        args=("category",),
        format_func=lambda value: value or "Sélectionner une catégorie",
    )
    st.selectbox(
        "Niveau de preuve",
        options=["", *EVIDENCE_LEVELS],
        key="draft_evidenceLevel",
        on_change=_sync_field,
        args=("evidenceLevel",),
        format_func=lambda value: value or "Niveau de preuve",
    )
    st.text_area("Description", key="draft_description", placeholder="Description de la recherche", height=100,
                 on_change=_sync_field, args=("description",))
    st.text_area("Notes", key="draft_notes", placeholder="Notes additionnelles", height=70,
                 on_change=_sync_field, args=("notes",))
    st.text_input(
        "Tags",
        key="tag_input",
        placeholder="Ajouter des tags (Entrée pour valider)",
        on_change=_commit_tag,
    )
    if form.draft.tags:
        columns = st.columns(min(len(form.draft.tags), 6))
        for index, tag in enumerate(form.draft.tags):
            with columns[index % len(columns)]:
                st.button(f"{tag} ×", key=f"remove_tag_{index}", on_click=form.remove_tag, args=(index,))
    st.button("Ajouter l'entrée", type="primary", on_click=_submit_entry)
    if form.errors:
        for issue in form.errors:
            st.warning(issue)
    if st.session_state.flash:
        st.success(st.session_state.flash)
        st.session_state.flash = None


def show_export_buttons(entries: List[Entry]) -> None:
    col1, col2 = st.columns(2)
    with col1:
        st.download_button(
            label="Exporter CSV",
            data=exporters.entries_to_csv(entries),
            file_name=exporters.CSV_FILENAME,
            mime=exporters.CSV_MIME,
        )
    with col2:
        st.download_button(
            label="Exporter DOCX",
            data=exporters.entries_to_document(entries),
            file_name=exporters.DOCUMENT_FILENAME,
            mime=exporters.DOCUMENT_MIME,
        )


def show_entry(entry: Entry, store: EntryStore) -> None:
    with st.container(border=True):
        col1, col2 = st.columns([12, 1])
        with col1:
            st.subheader(entry.title)
            st.markdown(f"[{entry.url}]({entry.url})")
            st.caption(f"Date: {entry.date}")
            st.caption(f"Catégorie: {entry.category}")
            st.caption(f"Niveau de preuve: {entry.evidence_level}")
            st.write(entry.description)
            if entry.notes:
                st.markdown(f"*{entry.notes}*")
            if entry.tags:
                st.write(" ".join(f"`{tag}`" for tag in entry.tags))
        with col2:
            st.button("🗑", key=f"delete_{entry.id}", on_click=store.delete, args=(entry.id,),
                      help="Supprimer l'entrée")


def show_import(store: EntryStore) -> None:
    """Let the user load entries back from a CSV export."""
    uploaded = st.file_uploader("Importer un export CSV", type=["csv"])
    if uploaded and st.button("Importer"):
        try:
            stats = store.import_entries(parsers.parse_entries_csv(uploaded))
            st.success(f"{stats['inserted']} entrées importées.")
            if stats["skipped"]:
                st.warning(f"{stats['skipped']} entrées ignorées (déjà présentes ou invalides).")
        except Exception as e:
            st.error(f"Erreur lors de l'import : {e}")


def show_sidebar(store: EntryStore) -> None:
    with st.sidebar:
        st.title("Journal")
        show_import(store)
        st.divider()
        stats = store.stats()
        st.metric("Entrées", stats["total_entries"])
        if stats["rejected_records"]:
            st.caption(f"{stats['rejected_records']} saisies ou lignes rejetées par la validation")
        if stats["category_distribution"]:
            category_df = pd.DataFrame(stats["category_distribution"])
            st.bar_chart(category_df.set_index("category")["count"])


def main() -> None:
    """Entry point for the Streamlit application."""
    st.set_page_config(
        page_title="Journal de recherche",
        page_icon="🔬",
        layout="centered",
    )
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
    _reset_session()
    store: EntryStore = st.session_state.store
    show_sidebar(store)
    st.title("Journal de recherche biomédicale")
    show_search_bar()
    st.divider()
    show_entry_form()
    st.divider()
    show_export_buttons(list(store.entries))
    visible = filtering.filter_entries(
        store.entries,
        search_term=st.session_state.search_term,
        filter_category=st.session_state.filter_category,
    )
    for entry in visible:
        show_entry(entry, store)


if __name__ == "__main__":
    main()
