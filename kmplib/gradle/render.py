#
# Copyright 2024 kmplib Project Authors. All rights reserved.
# Use of this source code is governed by a MIT-style
# license that can be found at
#
# https://opensource.org/license/MIT
#
# The above copyright notice and this permission
# notice shall be included in all copies or
# substantial portions of the Software.

"""
Render configured host projects as Gradle Kotlin DSL files.

Credentials are never written out; repositories and the Bintray extension
read them back with ``findProperty`` at build time.
"""

from typing import Any, Dict, List, Optional

from kmplib.config.dependencies import KotlinDependency, ProjectDependency
from kmplib.gradle.host import DeclaredDependency, PlatformDependency, Project
from kmplib.gradle.library import EXTENSION_NAME, LibraryExtension
from kmplib.gradle.publishing import (
    BINTRAY_API_KEY_KEY,
    BINTRAY_USER_KEY,
    ROOT_PUBLICATION,
)

INDENT = "    "

PLUGIN_VERSIONS = {
    "com.github.ben-manes.versions": "0.38.0",
    "com.jfrog.bintray": "1.8.5",
}
KOTLIN_PLUGINS = (
    "org.jetbrains.kotlin.multiplatform",
    "org.jetbrains.kotlin.jvm",
    "org.jetbrains.kotlin.kapt",
)
CORE_PLUGINS = ("java-library", "maven-publish", "signing")

# repositories with a dedicated DSL function
NAMED_REPOSITORIES = ("mavenCentral", "gradlePluginPortal", "mavenLocal")


def _quote(value: Any) -> str:
    text = str(value).replace('\\', '\\\\').replace('"', '\\"').replace('$', '\\$')
    return f'"{text}"'


def _indent(lines: List[str], depth: int = 1) -> List[str]:
    return [(INDENT * depth + line) if line else line for line in lines]


def _block(header: str, body: List[str]) -> List[str]:
    return [f"{header} {{"] + _indent(body) + ["}"]


def render_notation(notation: Any) -> str:
    if isinstance(notation, PlatformDependency):
        return f"platform({render_notation(notation.notation)})"
    if isinstance(notation, KotlinDependency):
        if notation.version:
            return f"kotlin({_quote(notation.simple_module_name)}, {_quote(notation.version)})"
        return f"kotlin({_quote(notation.simple_module_name)})"
    if isinstance(notation, ProjectDependency):
        if notation.configuration:
            return f"project(path = {_quote(notation.path)}, configuration = {_quote(notation.configuration)})"
        return f"project({_quote(notation.path)})"
    return _quote(notation)


def render_dependency(dependency: DeclaredDependency, quote_configuration: bool = False) -> List[str]:
    configuration = _quote(dependency.configuration) if quote_configuration else dependency.configuration
    call = f"{configuration}({render_notation(dependency.notation)})"
    body = []
    for rule in dependency.excludes:
        args = ", ".join(f"{key} = {_quote(value)}" for key, value in rule.items())
        body.append(f"exclude({args})")
    if dependency.reason:
        body.append(f"because({_quote(dependency.reason)})")
    if not body:
        return [call]
    return _block(call, body)


def _render_plugins(project: Project) -> List[str]:
    body = []
    for plugin_id in project.plugins:
        if plugin_id in CORE_PLUGINS:
            body.append(f"`{plugin_id}`")
        elif plugin_id in KOTLIN_PLUGINS:
            body.append(f"id({_quote(plugin_id)}) version {_quote(project.kotlin_version)}")
        elif plugin_id in PLUGIN_VERSIONS:
            body.append(f"id({_quote(plugin_id)}) version {_quote(PLUGIN_VERSIONS[plugin_id])}")
        else:
            body.append(f"id({_quote(plugin_id)})")
    return _block("plugins", body) if body else []


def _render_repository(name: str, url: str, credential_keys: Optional[Dict[str, str]] = None) -> List[str]:
    if name in NAMED_REPOSITORIES and not credential_keys:
        return [f"{name}()"]
    body = [f"name = {_quote(name)}", f"url = uri({_quote(url)})"]
    if credential_keys:
        body += _block("credentials", [
            f"{field} = findProperty({_quote(key)}) as String?"
            for field, key in credential_keys.items()
        ])
    return _block("maven", body)


def _render_repositories(project: Project) -> List[str]:
    repositories = project.root_project.repositories
    if not repositories:
        return []
    body = []
    for repository in repositories:
        body += _render_repository(repository.name, repository.url)
    return _block("repositories", body)


def _render_kotlin(project: Project) -> List[str]:
    kotlin = project.kotlin
    if kotlin is None:
        return []

    body = []
    if kotlin.explicit_api == "strict":
        body.append("explicitApi()")
    if body:
        body.append("")

    for target in kotlin.targets.values():
        target_body = []
        if target.platform == "jvm":
            if "jvmTarget" in target.attributes:
                target_body += _block("compilations.all", [
                    f"kotlinOptions.jvmTarget = {_quote(target.attributes['jvmTarget'])}",
                ])
            if target.attributes.get("withJava"):
                target_body.append("withJava()")
        elif target.platform == "js":
            if target.attributes.get("browser"):
                target_body.append("browser()")
            if target.attributes.get("nodejs"):
                target_body.append("nodejs()")
        if target.free_compiler_args:
            args = ", ".join(_quote(arg) for arg in target.free_compiler_args)
            target_body += _block("compilations.all", [
                f"kotlinOptions.freeCompilerArgs += listOf({args})",
            ])

        header = f"{target.platform}()" if target.name == target.platform else f"{target.platform}({_quote(target.name)})"
        body += _block(header, target_body) if target_body else [header]

    source_sets_body = []
    predefined = set(kotlin.targets) | {"common"}
    for source_set in kotlin.source_sets.values():
        prefix = source_set.name[:-4] if source_set.name.endswith(("Main", "Test")) else source_set.name
        delegate = "getting" if prefix in predefined else "creating"
        set_body = []
        for parent in source_set.depends_on:
            set_body.append(f"dependsOn({parent})")
        if source_set.kotlin_dirs:
            dirs = ", ".join(_quote(d) for d in source_set.kotlin_dirs)
            set_body.append(f"kotlin.setSrcDirs(listOf({dirs}))")
        if source_set.resource_dirs:
            dirs = ", ".join(_quote(d) for d in source_set.resource_dirs)
            set_body.append(f"resources.setSrcDirs(listOf({dirs}))")

        settings = source_set.language_settings
        settings_body = [f"useExperimentalAnnotation({_quote(name)})" for name in settings.opt_ins]
        settings_body += [f"enableLanguageFeature({_quote(name)})" for name in settings.language_features]
        if settings.progressive_mode:
            settings_body.append("progressiveMode = true")
        if settings_body:
            set_body += _block("languageSettings", settings_body)

        dependencies_body = []
        for dependency in source_set.dependencies.declared():
            dependencies_body += render_dependency(dependency)
        if dependencies_body:
            set_body += _block("dependencies", dependencies_body)

        source_sets_body += _block(f"val {source_set.name} by {delegate}", set_body)

    if source_sets_body:
        if body:
            body.append("")
        body += _block("sourceSets", source_sets_body)

    if kotlin.free_compiler_args:
        args = ", ".join(_quote(arg) for arg in kotlin.free_compiler_args)
        body.append("")
        body += _block("targets.all", _block("compilations.all", [
            f"kotlinOptions.freeCompilerArgs += listOf({args})",
        ]))

    return _block("kotlin", body)


def _render_kotlin_jvm(project: Project) -> List[str]:
    jvm = project.kotlin_jvm
    if jvm is None:
        return []

    lines = _block("java", [
        f"sourceCompatibility = JavaVersion.toVersion({_quote(jvm.source_compatibility)})",
        f"targetCompatibility = JavaVersion.toVersion({_quote(jvm.target_compatibility)})",
    ])

    source_sets_body = []
    for source_set in jvm.source_sets.values():
        set_body = []
        if source_set.kotlin_dirs:
            dirs = ", ".join(_quote(d) for d in source_set.kotlin_dirs)
            set_body.append(f"kotlin.setSrcDirs(listOf({dirs}))")
        if source_set.resource_dirs:
            dirs = ", ".join(_quote(d) for d in source_set.resource_dirs)
            set_body.append(f"resources.setSrcDirs(listOf({dirs}))")
        source_sets_body += _block(f"getByName({_quote(source_set.name)})", set_body)
    if source_sets_body:
        lines += [""] + _block("sourceSets", source_sets_body)

    compile_body = [
        f"sourceCompatibility = {_quote(jvm.source_compatibility)}",
        f"targetCompatibility = {_quote(jvm.target_compatibility)}",
    ]
    if jvm.free_compiler_args:
        args = ", ".join(_quote(arg) for arg in jvm.free_compiler_args)
        compile_body.append(f"kotlinOptions.freeCompilerArgs = listOf({args})")
    if jvm.jvm_target:
        compile_body.append(f"kotlinOptions.jvmTarget = {_quote(jvm.jvm_target)}")
    lines += [""] + _block("tasks.withType<KotlinCompile>", compile_body)
    return lines


def _render_project_dependencies(project: Project) -> List[str]:
    body = []
    for dependency in project.dependencies:
        if dependency.source_set is None:
            body += render_dependency(dependency, quote_configuration=True)
    return _block("dependencies", body) if body else []


def _render_resolution_rules(project: Project) -> List[str]:
    lines = []
    for rule in project.resolution_rules:
        matcher = "configurations.all"
        if rule.configuration_prefix:
            condition = f"it.name.startsWith({_quote(rule.configuration_prefix)})"
            for excluded in rule.excluded_prefixes:
                condition += f" && !it.name.startsWith({_quote(excluded)})"
            matcher = f"configurations.matching {{ {condition} }}.all"
        lines += _block(matcher, _block("resolutionStrategy.eachDependency", _block(
            f"if (requested.group == {_quote(rule.group)})",
            [f"useVersion({_quote(rule.version)})", f"because({_quote(rule.reason)})"],
        )))
    return lines


def _render_tasks(project: Project) -> List[str]:
    lines = []
    for task in project.tasks.values():
        if task.type == "Wrapper":
            lines += _block("tasks.withType<Wrapper>", [
                f"distributionType = Wrapper.DistributionType.{task.properties.get('distributionType', 'ALL')}",
                f"gradleVersion = {_quote(task.properties.get('gradleVersion', ''))}",
            ])
            continue
        body = []
        if "archiveClassifier" in task.properties:
            body.append(f"archiveClassifier.set({_quote(task.properties['archiveClassifier'])})")
        for source in task.properties.get("sources", []):
            body.append(f"from({_quote(source)})")
        lines += _block(f"val {task.name} by tasks.registering({task.type}::class)", body)
    return lines


def _render_pom(pom: Dict[str, Any]) -> List[str]:
    body = [
        f"name.set({_quote(pom['name'])})",
        f"description.set({_quote(pom['description'])})",
        f"url.set({_quote(pom['url'])})",
    ]
    body += _block("licenses", [
        line for license in pom['licenses'] for line in _block("license", [
            f"name.set({_quote(license['name'])})",
            f"url.set({_quote(license['url'])})",
        ])
    ])
    body += _block("developers", [
        line for developer in pom['developers'] for line in _block("developer", [
            f"{key}.set({_quote(value)})" for key, value in developer.items() if value
        ])
    ])
    scm = pom['scm']
    body += _block("scm", [
        f"connection.set({_quote(scm['connection'])})",
        f"developerConnection.set({_quote(scm['developerConnection'])})",
        f"url.set({_quote(scm['url'])})",
    ])
    return _block("pom", body)


def _render_publishing(project: Project) -> List[str]:
    publishing = project.publishing
    if not publishing.publications:
        return []

    body = []
    if publishing.repositories:
        repositories_body = []
        for repository in publishing.repositories:
            repositories_body += _render_repository(repository.name, repository.url, repository.credential_keys)
        body += _block("repositories", repositories_body)

    publications_body = []
    for publication in publishing.publications.values():
        publication_body = []
        if publication.component:
            publication_body.append(f"from(components[{_quote(publication.component)}])")
        publication_body.append(f"artifactId = {_quote(publication.artifact_id)}")
        for artifact in publication.artifacts:
            publication_body.append(f"artifact({artifact})")
        if publication.pom:
            publication_body += _render_pom(publication.pom)
        if publication.component:
            # created here, multiplatform publications come from the Kotlin plugin
            header = f"create<MavenPublication>({_quote(publication.name)})"
        else:
            header = f"matching {{ it.name == {_quote(publication.name)} }}.withType<MavenPublication>().configureEach"
        publications_body += _block(header, publication_body)
    body += _block("publications", publications_body)

    lines = _block("publishing", body)

    if project.kotlin is not None and ROOT_PUBLICATION not in publishing.publications:
        lines += [""] + _block("tasks.withType<AbstractPublishToMaven>().configureEach", [
            f"onlyIf {{ publication.name != {_quote(ROOT_PUBLICATION)} }}",
        ])

    if project.signing.signed_publications:
        lines += [""] + _block("signing", [
            f"sign(publishing.publications[{_quote(name)}])"
            for name in project.signing.signed_publications
        ])
    return lines


def _render_bintray(project: Project) -> List[str]:
    bintray = project.extensions.get("bintray")
    if bintray is None:
        return []
    publications = ", ".join(_quote(name) for name in bintray.publications)
    licenses = ", ".join(_quote(name) for name in bintray.licenses)
    return _block("bintray", [
        f"user = findProperty({_quote(BINTRAY_USER_KEY)}) as String?",
        f"key = findProperty({_quote(BINTRAY_API_KEY_KEY)}) as String?",
        f"setPublications({publications})",
    ] + _block("pkg.apply", [
        f"repo = {_quote(bintray.repo)}",
        f"name = {_quote(bintray.package_name)}",
        f"issueTrackerUrl = {_quote(bintray.issue_tracker_url)}",
        f"vcsUrl = {_quote(bintray.vcs_url)}",
        f"websiteUrl = {_quote(bintray.website_url)}",
        f"publicDownloadNumbers = {str(bintray.public_download_numbers).lower()}",
        f"publish = {str(bintray.publish).lower()}",
        f"setLicenses({licenses})",
    ] + _block("version.apply", [
        f"name = {_quote(bintray.version_name)}",
        f"vcsTag = {_quote(bintray.version_name)}",
    ])))


def render_build_script(project: Project) -> str:
    """
    Render ``build.gradle.kts`` for one host project.

    Returns:
        Script content, sections separated by blank lines
    """
    sections = []
    if project.kotlin_jvm is not None:
        sections.append(["import org.jetbrains.kotlin.gradle.tasks.KotlinCompile"])
    sections.append(_render_plugins(project))

    header = []
    if project.group:
        header.append(f"group = {_quote(project.group)}")
    if project.version:
        header.append(f"version = {_quote(project.version)}")
    if project.description:
        header.append(f"description = {_quote(project.description)}")
    sections.append(header)

    sections += [
        _render_repositories(project),
        _render_kotlin(project),
        _render_kotlin_jvm(project),
        _render_project_dependencies(project),
        _render_resolution_rules(project),
        _render_tasks(project),
        _render_publishing(project),
        _render_bintray(project),
    ]

    lines = []
    for section in sections:
        if not section:
            continue
        if lines:
            lines.append("")
        lines += section
    return '\n'.join(lines) + '\n'


def render_settings_script(root: Project) -> str:
    lines = [f"rootProject.name = {_quote(root.name)}"]
    children = [p for p in root.all_projects() if p is not root]
    if children:
        lines.append("")
        lines.append("include(" + ", ".join(_quote(p.path) for p in children) + ")")
    return '\n'.join(lines) + '\n'


def render_gradle_properties(root: Project) -> str:
    """
    Render the root ``gradle.properties`` with Maven coordinates and POM metadata.

    Returns:
        String content for gradle.properties file
    """
    library: Optional[LibraryExtension] = root.find_extension(EXTENSION_NAME)
    lines = ["kotlin.code.style=official"]
    if library is None:
        return '\n'.join(lines) + '\n'

    lines.append(f"GROUP={library.group}")
    lines.append(f"VERSION_NAME={library.version}")

    lines.append(f"POM_NAME={library.name}")
    lines.append(f"POM_DESCRIPTION={root.description or f'{library.name} library'}")
    lines.append(f"POM_URL={library.url}")

    lines.append(f"POM_LICENCE_NAME={library.license_name}")
    lines.append(f"POM_LICENCE_URL={library.license_url}")
    lines.append("POM_LICENCE_DIST=repo")

    lines.append(f"POM_SCM_URL={library.url}")
    lines.append(f"POM_SCM_CONNECTION=scm:git:{library.url}.git")
    lines.append(f"POM_SCM_DEV_CONNECTION=scm:git:git@github.com:{library.owner}/{library.name}.git")

    lines.append(f"POM_DEVELOPER_ID={library.developer_id}")
    lines.append(f"POM_DEVELOPER_NAME={library.developer_name}")
    if library.developer_email:
        lines.append(f"POM_DEVELOPER_EMAIL={library.developer_email}")

    return '\n'.join(lines) + '\n'
