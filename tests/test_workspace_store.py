import pytest

from conftest import make_png
from models.workspace_models import ResultEntry, SelectedFile
from services.workspace.preview_registry import PreviewRegistry
from services.workspace.workspace_store import TooManyImagesError, WorkspaceBusyError, WorkspaceStore


def selected(count, prefix="img"):
    return [SelectedFile(f"{prefix}{i}.png", "image/png", make_png((i * 30, 0, 0))) for i in range(count)]


@pytest.fixture
def previews():
    return PreviewRegistry()


@pytest.fixture
def store(previews):
    return WorkspaceStore(previews, max_images=5)


@pytest.fixture
def state(store):
    return store.create()


def with_results(store, state):
    results = {image.id: ResultEntry(image_id=image.id, description=image.filename) for image in state.images}
    store.begin_generation(state.workspace_id)
    store.finish_generation(state.workspace_id, results)
    return state


def test_select_creates_entries_with_previews(store, state, previews):
    store.select_images(state.workspace_id, selected(3))

    assert [image.filename for image in state.images] == ["img0.png", "img1.png", "img2.png"]
    assert state.file_input == ["img0.png", "img1.png", "img2.png"]
    assert len(previews) == 3
    assert all(image.preview_handle in previews for image in state.images)


def test_too_many_images_leaves_state_untouched(store, state, previews):
    store.select_images(state.workspace_id, selected(2))
    with_results(store, state)
    images_before = list(state.images)
    results_before = dict(state.results)

    with pytest.raises(TooManyImagesError, match="maximum of 5 images"):
        store.select_images(state.workspace_id, selected(6, prefix="new"))

    assert state.images == images_before
    assert state.results == results_before
    assert len(previews) == 2


def test_append_counts_existing_images(store, state):
    store.select_images(state.workspace_id, selected(3))

    with pytest.raises(TooManyImagesError):
        store.select_images(state.workspace_id, selected(3, prefix="more"), append=True)

    store.select_images(state.workspace_id, selected(2, prefix="more"), append=True)
    assert len(state.images) == 5
    assert state.file_input[-2:] == ["more0.png", "more1.png"]


def test_replace_releases_superseded_previews_and_clears_results(store, state, previews):
    store.select_images(state.workspace_id, selected(2))
    old_handles = [image.preview_handle for image in state.images]
    with_results(store, state)

    store.select_images(state.workspace_id, selected(1, prefix="next"))

    assert state.results == {}
    assert not any(handle in previews for handle in old_handles)
    assert len(previews) == 1


def test_undecodable_image_rolls_back_selection(store, state, previews):
    store.select_images(state.workspace_id, selected(1))
    before = list(state.images)
    files = selected(2, prefix="ok") + [SelectedFile("broken.png", "image/png", b"not an image")]

    with pytest.raises(ValueError):
        store.select_images(state.workspace_id, files)

    assert state.images == before
    assert len(previews) == 1


def test_remove_at_index_removes_matching_result(store, state, previews):
    store.select_images(state.workspace_id, selected(4))
    with_results(store, state)
    removed = state.images[1]

    store.remove_image_at(state.workspace_id, 1)

    assert [image.filename for image in state.images] == ["img0.png", "img2.png", "img3.png"]
    assert removed.id not in state.results
    assert [state.results[image.id].description for image in state.images] == ["img0.png", "img2.png", "img3.png"]
    assert removed.preview_handle not in previews


def test_remove_image_without_result(store, state):
    store.select_images(state.workspace_id, selected(2))

    store.remove_image(state.workspace_id, state.images[0].id)

    assert [image.filename for image in state.images] == ["img1.png"]
    assert state.results == {}


def test_remove_out_of_range(store, state):
    store.select_images(state.workspace_id, selected(1))

    with pytest.raises(IndexError):
        store.remove_image_at(state.workspace_id, 3)
    with pytest.raises(KeyError):
        store.remove_image(state.workspace_id, "missing")


def test_clear_resets_everything(store, state, previews):
    store.select_images(state.workspace_id, selected(3))
    with_results(store, state)

    store.clear(state.workspace_id)

    assert state.images == []
    assert state.results == {}
    assert state.file_input == []
    assert len(previews) == 0


def test_generation_flags(store, state):
    with pytest.raises(ValueError):
        store.begin_generation(state.workspace_id)

    store.select_images(state.workspace_id, selected(1))
    images = store.begin_generation(state.workspace_id)
    assert state.is_generating
    assert images == state.images

    with pytest.raises(WorkspaceBusyError):
        store.begin_generation(state.workspace_id)

    store.finish_generation(state.workspace_id)
    assert not state.is_generating


def test_finish_ignores_results_for_removed_images(store, state):
    store.select_images(state.workspace_id, selected(2))
    images = store.begin_generation(state.workspace_id)
    store.remove_image(state.workspace_id, images[0].id)

    results = {image.id: ResultEntry(image_id=image.id, description="x") for image in images}
    store.finish_generation(state.workspace_id, results)

    assert list(state.results) == [images[1].id]


def test_discard_releases_previews(store, state, previews):
    store.select_images(state.workspace_id, selected(2))

    store.discard(state.workspace_id)

    assert len(previews) == 0
    with pytest.raises(KeyError):
        store.get(state.workspace_id)
    assert store.finish_generation(state.workspace_id) is None
