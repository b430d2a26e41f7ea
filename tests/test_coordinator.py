"""Tests for tgmcheck.coordinator."""

from __future__ import annotations

from tests._fixtures.token_builder import TokenBuilder, tgmpa_file
from tgmcheck.coordinator import ScanCoordinator, ScanState
from tgmcheck.models import FindingKind
from tgmcheck.resolver import ResolverError

WPORG = "for parent theme MyTheme for publication on WordPress.org"


def _kinds(findings):
    return [finding.kind for finding in findings]


def _coordinator(resolver_factory, **kwargs) -> ScanCoordinator:
    return ScanCoordinator(resolver_factory(payload={"tag_name": "2.5.0"}, **kwargs))


def test_unrelated_file_yields_nothing(resolver_factory) -> None:
    builder = TokenBuilder("theme/functions.php")
    builder.doc_block([("package", "MyTheme")])
    builder.class_("MyTheme_Walker")
    builder.function("mytheme_setup")
    builder.const("MYTHEME_VERSION")
    builder.call("do_action")
    source = builder.build()
    coordinator = _coordinator(resolver_factory)
    state = coordinator.new_state()

    assert coordinator.process_file(state, source) == []
    assert state.files_checked == {}


def test_outdated_library_is_reported_once(resolver_factory) -> None:
    source = tgmpa_file(f"2.4.0 {WPORG}")
    coordinator = _coordinator(resolver_factory)
    state = coordinator.new_state()

    findings = coordinator.process_file(state, source)

    assert [(finding.kind, finding.args) for finding in findings] == [
        (FindingKind.UPGRADE_REQUIRED, ("2.5.0", "2.4.0")),
        (FindingKind.CONFIGURATION_OPTIONS, ("2.4.0", "2.5.0")),
    ]
    assert state.files_checked == {source.path: True}


def test_resolved_file_is_never_reprocessed(resolver_factory) -> None:
    source = tgmpa_file("2.4.0")
    coordinator = _coordinator(resolver_factory)
    state = coordinator.new_state()
    coordinator.process_file(state, source)

    assert coordinator.process_file(state, source) == []
    for token in source:
        assert coordinator.process(state, source, token.position) == []


def test_repeated_classifier_matches_report_once(resolver_factory) -> None:
    source = tgmpa_file("2.4.0")
    coordinator = _coordinator(resolver_factory)
    state = coordinator.new_state()

    findings = []
    for token in source:
        if token.kind in ScanCoordinator.LISTEN_KINDS:
            findings.extend(coordinator.process(state, source, token.position))

    assert _kinds(findings).count(FindingKind.UPGRADE_REQUIRED) == 1


def test_missing_doc_block_yields_version_undetermined(resolver_factory) -> None:
    builder = TokenBuilder("theme/inc/renamed.php")
    builder.class_("TGM_Plugin_Activation")
    source = builder.build()
    coordinator = _coordinator(resolver_factory)
    state = coordinator.new_state()

    findings = coordinator.process_file(state, source)

    assert [(finding.kind, finding.args) for finding in findings] == [
        (FindingKind.VERSION_UNDETERMINED, ("2.5.0",))
    ]
    assert coordinator.process_file(state, source) == []


def test_unparseable_version_falls_back_to_undetermined(resolver_factory) -> None:
    source = tgmpa_file("@@VERSION@@")
    coordinator = _coordinator(resolver_factory)
    state = coordinator.new_state()

    assert _kinds(coordinator.process_file(state, source)) == [FindingKind.VERSION_UNDETERMINED]


def test_example_block_is_skipped_for_library_block(resolver_factory) -> None:
    builder = TokenBuilder("theme/inc/class-tgm-plugin-activation.php")
    builder.doc_block(
        [("package", "TGM-Plugin-Activation"), ("subpackage", "Example"), ("version", "2.3.0")]
    )
    builder.doc_block([("package", "TGM-Plugin-Activation"), ("version", f"2.5.0 {WPORG}")])
    builder.class_("TGM_Plugin_Activation")
    source = builder.build()
    coordinator = _coordinator(resolver_factory)
    state = coordinator.new_state()

    assert coordinator.process_file(state, source) == []
    assert state.files_checked == {source.path: True}


def test_doc_blocks_after_first_class_are_ignored(resolver_factory) -> None:
    builder = TokenBuilder("theme/inc/bundle.php")
    builder.class_("TGM_Plugin_Activation")
    builder.doc_block([("package", "TGM-Plugin-Activation"), ("version", f"2.4.0 {WPORG}")])
    source = builder.build()
    coordinator = _coordinator(resolver_factory)
    state = coordinator.new_state()

    assert _kinds(coordinator.process_file(state, source)) == [FindingKind.VERSION_UNDETERMINED]


def test_file_without_class_scans_all_blocks(resolver_factory) -> None:
    builder = TokenBuilder("theme/inc/plugins.php")
    builder.doc_block([("package", "TGM-Plugin-Activation"), ("version", f"2.5.0 {WPORG}")])
    builder.function("tgmpa")
    source = builder.build()
    coordinator = _coordinator(resolver_factory)
    state = coordinator.new_state()

    assert coordinator.process_file(state, source) == []
    assert state.files_checked == {source.path: True}


def test_rate_limit_notice_is_emitted_exactly_once(resolver_factory) -> None:
    resolver = resolver_factory(status=403, headers={"x-ratelimit-remaining": "0"})
    coordinator = ScanCoordinator(resolver)
    state = coordinator.new_state()
    assert state.resolver_error is ResolverError.RATE_LIMITED
    unrelated = TokenBuilder("theme/functions.php").build()

    first = coordinator.process(state, unrelated, 0)
    second = coordinator.process(state, unrelated, 0)

    assert _kinds(first) == [FindingKind.RATE_LIMIT_REACHED]
    assert first[0].position == 0
    assert second == []
    assert state.resolver_error is None


def test_auth_notice_precedes_file_findings(resolver_factory) -> None:
    resolver = resolver_factory(status=401, token="expired")
    coordinator = ScanCoordinator(resolver)
    state = coordinator.new_state()

    findings = coordinator.process_file(state, tgmpa_file(f"2.4.0 {WPORG}"))
    later = coordinator.process_file(state, tgmpa_file(f"2.4.0 {WPORG}", path="other/tgm-plugin-activation.php"))

    assert _kinds(findings) == [
        FindingKind.AUTH_TOKEN_INVALID,
        FindingKind.UPGRADE_REQUIRED,
        FindingKind.CONFIGURATION_OPTIONS,
    ]
    assert FindingKind.AUTH_TOKEN_INVALID not in _kinds(later)
    # Comparisons continue against the fallback version.
    assert findings[1].args == ("2.5.0", "2.4.0")


def test_lazy_state_resolves_on_first_process(resolver_factory) -> None:
    resolver = resolver_factory(payload={"tag_name": "2.6.1"})
    coordinator = ScanCoordinator(resolver)
    state = coordinator.new_state(prefetch=False)
    assert state.resolved_version is None
    assert resolver.requests == []

    findings = coordinator.process_file(state, tgmpa_file(f"2.5.0 {WPORG}"))

    assert state.resolved_version == "2.6.1"
    assert [(finding.kind, finding.args) for finding in findings] == [
        (FindingKind.UPGRADE_REQUIRED, ("2.6.1", "2.5.0"))
    ]


def test_states_do_not_share_progress(resolver_factory) -> None:
    coordinator = _coordinator(resolver_factory)
    source = tgmpa_file("2.4.0")

    first = coordinator.process_file(coordinator.new_state(), source)
    second = coordinator.process_file(coordinator.new_state(), source)

    assert _kinds(first) == _kinds(second)
    assert len(coordinator.resolver.requests) == 1


def test_sources_without_path_are_tracked_by_identity(resolver_factory) -> None:
    coordinator = _coordinator(resolver_factory)
    state = coordinator.new_state()
    builder = TokenBuilder(path=None)
    builder.class_("TGM_Plugin_Activation")
    source = builder.build()

    assert _kinds(coordinator.process_file(state, source)) == [FindingKind.VERSION_UNDETERMINED]
    assert coordinator.process_file(state, source) == []


def test_state_defaults() -> None:
    state = ScanState()

    assert state.resolved_version is None
    assert state.resolver_error is None
    assert state.is_resolved("anything") is False


def test_pathless_sources_keep_their_own_progress(resolver_factory) -> None:
    coordinator = _coordinator(resolver_factory)
    state = coordinator.new_state()

    def pathless_source():
        builder = TokenBuilder(path=None)
        builder.class_("TGM_Plugin_Activation")
        return builder.build()

    first = pathless_source()
    coordinator.process_file(state, first)
    del first

    second = pathless_source()

    assert _kinds(coordinator.process_file(state, second)) == [FindingKind.VERSION_UNDETERMINED]
    assert second in state.files_checked


def test_large_unrelated_file_is_scanned_linearly(resolver_factory) -> None:
    builder = TokenBuilder("theme/functions.php")
    for index in range(50_000):
        builder.call(f"mytheme_helper_{index}")
    source = builder.build()
    source.tokens = _NoTailCopies(source.tokens)
    coordinator = _coordinator(resolver_factory)
    state = coordinator.new_state()

    assert coordinator.process_file(state, source) == []
    assert state.files_checked == {}


class _NoTailCopies(list):
    def __getitem__(self, item):
        if isinstance(item, slice):
            raise AssertionError("token list was sliced during lookup")
        return super().__getitem__(item)
