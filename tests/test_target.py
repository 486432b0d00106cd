from __future__ import annotations

from modules.target import Platform, Target, TargetTag


def test_target_is_parsed_from_name_tokens_after_the_first() -> None:
    target = Target.from_module_name("gluon-demo-application-gwt")

    assert target.tags == (TargetTag.GWT,)
    assert Target.from_module_name("app-css-web").tags == (TargetTag.WEB,)
    assert Target.from_module_name("app").tags == ()


def test_generic_target_supports_every_platform() -> None:
    target = Target.from_module_name("app-core")

    assert target.supported_platforms == tuple(Platform)
    assert str(target) == "generic"


def test_implied_tags_restrict_platforms() -> None:
    assert TargetTag.OPENJFX.supported_platforms == (Platform.JRE,)
    assert TargetTag.DESKTOP.supported_platforms == (Platform.JRE,)
    assert TargetTag.WEB.supported_platforms == (
        Platform.GWT,
        Platform.J2CL,
        Platform.TEAVM,
    )
    assert TargetTag.BROWSER in TargetTag.WEB.implied_tags


def test_mono_platform() -> None:
    assert Target.of(TargetTag.GWT).is_mono_platform(Platform.GWT)
    assert not Target.of(TargetTag.WEB).is_mono_platform()
    assert Target.of(TargetTag.OPENJFX).is_mono_platform(Platform.JRE)


def test_incompatible_target_is_rejected() -> None:
    desktop = Target.of(TargetTag.DESKTOP)
    gwt = Target.of(TargetTag.GWT)

    assert desktop.grade_target_match(gwt) < 0
    assert not desktop.is_compatible_with(gwt)


def test_more_specific_match_grades_higher() -> None:
    requested = Target.of(TargetTag.GWT)

    generic = Target.of().grade_target_match(requested)
    web = Target.of(TargetTag.WEB).grade_target_match(requested)
    gwt = Target.of(TargetTag.GWT).grade_target_match(requested)

    assert generic == 0
    assert web == 4
    assert gwt > web > generic


def test_tag_deeper_than_requested_is_too_specific() -> None:
    gluon = Target.of(TargetTag.GLUON)

    assert gluon.grade_target_match(Target.of(TargetTag.OPENJFX)) < 0
    assert Target.of(TargetTag.OPENJFX).grade_target_match(Target.of(TargetTag.GLUON)) >= 0


def test_multi_tag_module_is_kept_when_one_tag_matches_exactly() -> None:
    target = Target.from_module_name("app-audio-openjfx-gwt")

    assert target.is_compatible_with(Target.of(TargetTag.GWT))
