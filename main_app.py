"""
Shoppies Nominations Portal - search OMDb, nominate five movies, share the list.
Opening the app with share-link query parameters shows the read-only list view.
"""

import streamlit as st
import sys
import os

# =============================================================================
# IMPORTS AND SETUP
# =============================================================================

# Add src directory to path for imports
current_dir = os.path.dirname(os.path.abspath(__file__))
src_dir = os.path.join(current_dir, 'src')

if src_dir not in sys.path:
    sys.path.insert(0, src_dir)

from loguru import logger

from local_storage import JsonFileStorage
from movie_search import search_movies, fetch_movies
from nomination_store import NominationStore, NominationRejected
from share_link import (
    InvalidLink,
    decode_share_link,
    describe,
    display_subtitle,
    display_title,
    encode_share_link,
    is_share_link,
    query_params_to_mapping,
)
from utils import (
    MAX_NOMINATIONS,
    SEARCH_QUERY_KEY,
    get_omdb_api_key,
    get_public_base_url,
    get_storage_path,
    setup_logging,
)

APP_TITLE = "Shoppies Nominations Portal"
POSTER_WIDTH = 200

# =============================================================================
# SESSION STATE MANAGEMENT
# =============================================================================

def initialize_session_state():
    """Initialize all required session state variables."""

    if "logging_ready" not in st.session_state:
        setup_logging()
        st.session_state.logging_ready = True

    # Durable storage and the nomination list loaded from it
    if "storage" not in st.session_state:
        st.session_state.storage = JsonFileStorage(get_storage_path())

    if "store" not in st.session_state:
        store = NominationStore(st.session_state.storage)
        store.load_from_storage()
        st.session_state.store = store

    # Widget defaults restored from storage
    if "search_query" not in st.session_state:
        st.session_state.search_query = st.session_state.storage.get(SEARCH_QUERY_KEY) or ""

    if "share_name" not in st.session_state or "share_author" not in st.session_state:
        metadata = st.session_state.store.share_metadata()
        st.session_state.share_name = metadata.name or ""
        st.session_state.share_author = metadata.author or ""

    # UI state
    if "confirm_clear" not in st.session_state:
        st.session_state.confirm_clear = False

    if "flash" not in st.session_state:
        st.session_state.flash = None

# =============================================================================
# UI STYLING
# =============================================================================

def inject_custom_css():
    """Inject CSS for poster placeholders and the public grid."""
    st.markdown("""
    <style>
    .no-poster {
        background-color: #ddd;
        height: 300px;
        display: flex;
        align-items: center;
        justify-content: center;
        border-radius: 8px;
        color: #666;
    }

    .movie-year {
        color: #6d7175;
        font-size: 0.9rem;
    }

    .complete-banner {
        text-align: center;
        font-weight: bold;
    }
    </style>
    """, unsafe_allow_html=True)

# =============================================================================
# CORE FUNCTIONS
# =============================================================================

class LookupFailed(Exception):
    """Carries a failed OMDb result out of a cached function so it is not cached."""

    def __init__(self, result):
        self.result = result
        super().__init__("OMDb lookup failed")


@st.cache_data(ttl=600, show_spinner=False)
def _search_successes(query, api_key):
    response = search_movies(query, api_key=api_key)
    if not response.ok:
        raise LookupFailed(response)
    return response


@st.cache_data(ttl=3600, show_spinner=False)
def _lookup_successes(imdb_ids, api_key):
    lookups = fetch_movies(list(imdb_ids), api_key=api_key)
    if not all(lookup.ok for lookup in lookups):
        raise LookupFailed(lookups)
    return lookups


def cached_search(query, api_key):
    """Search OMDb, caching only successful responses so errors can be retried."""
    try:
        return _search_successes(query, api_key)
    except LookupFailed as e:
        return e.result


def cached_lookup(imdb_ids, api_key):
    """Resolve share-link ids; a list with any failed lookup is refetched next time."""
    try:
        return _lookup_successes(tuple(imdb_ids), api_key)
    except LookupFailed as e:
        return e.result


def on_search_change():
    """Persist the search box so a reload resumes the same search."""
    st.session_state.storage.set(SEARCH_QUERY_KEY, st.session_state.search_query)


def on_share_name_change():
    st.session_state.store.set_share_name(st.session_state.share_name.strip())


def on_share_author_change():
    st.session_state.store.set_share_author(st.session_state.share_author.strip())


def nominate_movie(movie):
    """Add a search result to the nomination list."""
    store = st.session_state.store
    try:
        store.add(movie)
    except NominationRejected as e:
        st.session_state.flash = ("warning", e.message)
        return

    if store.is_complete:
        st.session_state.flash = ("success", f"🎉 You've nominated {MAX_NOMINATIONS} movies! Your list is ready to share.")
    else:
        st.session_state.flash = ("info", f"✅ Nominated {movie.title}")


def remove_nomination(imdb_id):
    st.session_state.store.remove(imdb_id)


def confirm_clear():
    st.session_state.store.clear()
    st.session_state.share_name = ""
    st.session_state.confirm_clear = False
    st.session_state.flash = ("info", "Nomination list cleared.")


def render_poster(movie):
    if movie.has_poster:
        st.image(movie.poster_url, width=POSTER_WIDTH)
    else:
        st.markdown('<div class="no-poster">🎬<br>No Poster</div>', unsafe_allow_html=True)


def render_flash():
    flash = st.session_state.flash
    if not flash:
        return
    level, message = flash
    getattr(st, level)(message)
    st.session_state.flash = None

# =============================================================================
# UI COMPONENTS
# =============================================================================

def render_search():
    """Render the search box and the nominate-able results."""
    store = st.session_state.store

    st.markdown("### 🔍 Search for movies to nominate")
    query = st.text_input(
        "Search",
        key="search_query",
        on_change=on_search_change,
        placeholder="Search by title",
        label_visibility="collapsed",
    )

    if not query.strip():
        return

    response = cached_search(query.strip(), get_omdb_api_key())
    if not response.ok:
        st.error(f"❌ {response.error}")
        return

    st.caption(f'Results for "{query.strip()}"')
    for movie in response.movies:
        col_poster, col_info, col_action = st.columns([1, 3, 1])
        with col_poster:
            render_poster(movie)
        with col_info:
            st.markdown(f"**{movie.title}**")
            st.markdown(f'<span class="movie-year">{movie.year}</span>', unsafe_allow_html=True)
        with col_action:
            nominated = store.is_nominated(movie.imdb_id)
            st.button(
                "Nominated" if nominated else "Nominate",
                key=f"nominate_{movie.imdb_id}",
                disabled=nominated or store.is_complete,
                on_click=nominate_movie,
                args=(movie,),
            )


def render_nominations():
    """Render the current nominations with remove and clear actions."""
    store = st.session_state.store

    st.markdown("### 🏆 Your nominations")
    st.caption(f"{len(store)} of {MAX_NOMINATIONS} nominated")

    if not len(store):
        st.write("Search for a movie and press **Nominate** to add it here.")
        return

    for movie in store:
        col_info, col_action = st.columns([3, 1])
        with col_info:
            st.markdown(f"**{movie.label}**")
        with col_action:
            st.button(
                "Remove",
                key=f"remove_{movie.imdb_id}",
                on_click=remove_nomination,
                args=(movie.imdb_id,),
            )

    if st.session_state.confirm_clear:
        st.warning("Remove all nominations? This cannot be undone.")
        col_yes, col_no = st.columns(2)
        with col_yes:
            st.button("Yes, clear list", type="primary", key="clear_yes", on_click=confirm_clear)
        with col_no:
            if st.button("Cancel", key="clear_no"):
                st.session_state.confirm_clear = False
                st.rerun()
    elif st.button("Clear nominations", key="clear_start"):
        st.session_state.confirm_clear = True
        st.rerun()


def render_share_panel():
    """Render list name / author fields and the generated share link."""
    store = st.session_state.store

    st.markdown("### 🔗 Share list")
    st.markdown('<p class="complete-banner">Your list is complete!</p>', unsafe_allow_html=True)

    st.caption("Give your list a name (optional). The link updates with any details you enter.")
    col_name, col_author = st.columns(2)
    with col_name:
        st.text_input("List name", key="share_name", on_change=on_share_name_change)
    with col_author:
        st.text_input("Author name", key="share_author", on_change=on_share_author_change)

    url = encode_share_link(store.nominations, store.share_metadata(), get_public_base_url())
    st.code(url, language=None)
    st.link_button("Open link", url)


def render_nomination_portal():
    st.title(f"🎬 {APP_TITLE}")
    render_flash()

    col_search, col_nominations = st.columns([2, 1])
    with col_search:
        render_search()
    with col_nominations:
        render_nominations()
        if st.session_state.store.is_complete:
            render_share_panel()


def render_invalid_link():
    st.title("Invalid link")
    st.subheader("One or more of the link parameters are invalid")
    st.caption("Please check that the link is correct and try again.")


def render_public_view(params):
    """Render a shared nomination list read-only."""
    try:
        payload = decode_share_link(params)
    except InvalidLink as e:
        logger.info(f"Invalid share link opened: {e.reason}")
        render_invalid_link()
        return

    st.title(display_title(payload))
    st.caption(display_subtitle(payload))
    st.write(describe(payload))

    with st.spinner("Loading nominations..."):
        lookups = cached_lookup(tuple(payload.identifiers), get_omdb_api_key())

    cols = st.columns(max(len(lookups), 1))
    for col, lookup in zip(cols, lookups):
        with col:
            if lookup.ok:
                render_poster(lookup.movie)
                st.markdown(f"**{lookup.movie.title}**")
                st.markdown(f'<span class="movie-year">{lookup.movie.year}</span>', unsafe_allow_html=True)
            else:
                st.error(f"{lookup.imdb_id}: {lookup.error}")

    st.divider()
    st.markdown(
        f"List created using the {APP_TITLE}. "
        f"[Create your own nomination list]({get_public_base_url()})"
    )

# =============================================================================
# MAIN APPLICATION
# =============================================================================

def main():
    """Main application function."""
    st.set_page_config(
        page_title=APP_TITLE,
        page_icon="🎬",
        layout="wide",
    )

    initialize_session_state()
    inject_custom_css()

    params = query_params_to_mapping(st.query_params)
    if is_share_link(params):
        render_public_view(params)
    else:
        render_nomination_portal()

if __name__ == "__main__":
    main()
