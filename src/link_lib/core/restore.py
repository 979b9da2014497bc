"""Pure helpers that decide how to restore an app's dependency declaration.

When a library is unlinked the application should get back exactly what
it declared before (an exact version, a range or a dist-tag) rather
than whatever the registry currently calls ``latest``.
"""

from __future__ import annotations

from link_lib.core.models import (
    DEPENDENCIES,
    DEV_DEPENDENCIES,
    DependencySpec,
    Manifest,
    RestorePlan,
)
from link_lib.core.versions import has_tag_suffix, is_exact_version, is_local_reference


def original_dependency_spec(app: Manifest, name: str) -> DependencySpec:
    """Capture the section and spec string *app* declares for *name*.

    The dev section wins whenever the package is listed there, so a
    dev-only dependency is never promoted to a production one.  The
    version string itself is taken from ``dependencies`` first.
    """
    in_dev = name in app.dev_dependencies
    section = DEV_DEPENDENCIES if in_dev else DEPENDENCIES
    spec = app.dependencies.get(name) or app.dev_dependencies.get(name) or None
    return DependencySpec(section=section, spec=spec)


def build_restore_plan(name: str, original: DependencySpec) -> RestorePlan:
    """Build the ``npm install`` arguments that restore *original*.

    Rules
    -----
    * No spec, or a local-path spec → install the bare *name*.
    * Otherwise install ``name@spec`` verbatim.
    * A fully resolved version, or one with a tag-like suffix such as
      ``0.5.0-nightly.5``, additionally gets ``--save-exact`` so npm does
      not rewrite it as ``^x.y.z``.
    """
    args: list[str] = ["--save-dev" if original.section == DEV_DEPENDENCIES else "--save-prod"]
    spec = original.spec.strip() if original.spec else ""

    if not spec or is_local_reference(spec):
        args.append(name)
        return RestorePlan(
            package=name,
            section=original.section,
            exact=False,
            install_args=tuple(args),
        )

    package = f"{name}@{spec}"
    exact = is_exact_version(spec) or has_tag_suffix(spec)
    args.append(package)
    if exact:
        args.append("--save-exact")
    return RestorePlan(
        package=package,
        section=original.section,
        exact=exact,
        install_args=tuple(args),
    )
