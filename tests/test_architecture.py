"""Tests for the architecture layer check."""

import textwrap

import pytest

from specguard.architecture import (
    check_architecture,
    classify_path,
    detect_violations,
    extract_imports,
    file_extension,
    format_violation_message,
    infer_import_layer,
)
from specguard.guard_types import UNRECOGNIZED, Classification, Violation
from specguard.rulesets import DEFAULT_REGISTRY, build_registry

JAVA = DEFAULT_REGISTRY.get("java")
SWIFT = DEFAULT_REGISTRY.get("swift")
VUE = DEFAULT_REGISTRY.get("vue")
TS = DEFAULT_REGISTRY.get("typescript")

ORDER_CONTROLLER = textwrap.dedent("""\
    package com.app.controller;

    import com.app.domain.Order;
    import com.app.gateway.PaymentGateway;
    import com.app.application.OrderService;
    import java.util.List;

    public class OrderController {}
""")


# --- Layer classifier ---

@pytest.mark.parametrize("path,expected", [
    ("src/controller/OrderController.java", ("java", "Controller")),
    ("src/appservice/OrderApp.java", ("java", "Application")),
    ("src/entity/Order.java", ("java", "Domain")),
    ("src/infra/PaymentClient.java", ("java", "Gateway")),
    ("src/dao/OrderDao.java", ("java", "Mapper")),
    ("App/ViewModels/LoginViewModel.swift", ("swift", "ViewModel")),
    ("App/Views/LoginView.swift", ("swift", "View")),
    ("App/API/Client.swift", ("swift", "Network")),
    ("src/components/Button.vue", ("vue", "View")),
    ("src/composables/useUser.ts", ("vue", "Composable")),
    ("src/api/user.ts", ("vue", "API")),
    ("src/utils/request.ts", ("vue", "Request")),
    ("src/controller/user.controller.ts", ("typescript", "Controller")),
    ("src/repository/user.repository.ts", ("typescript", "Repository")),
    ("src/model/user.tsx", ("typescript", "Model")),
])
def test_classify_path(path, expected):
    assert classify_path(path) == Classification(*expected)


def test_vue_fragments_win_over_generic_typescript():
    # /service/ is in both lists; the Vue list is checked first
    assert classify_path("src/service/user.service.ts") == Classification("vue", "Service")


def test_first_declared_fragment_wins():
    # /controller/ comes before /domain/ in the java rules
    assert classify_path("src/domain/controller/X.java").layer == "Controller"


def test_classify_is_case_insensitive():
    assert classify_path("src/Controller/OrderController.JAVA") == Classification("java", "Controller")


def test_classify_windows_path():
    assert classify_path("C:\\proj\\src\\controller\\A.java") == Classification("java", "Controller")


def test_classify_relative_first_segment():
    assert classify_path("controller/A.java") == Classification("java", "Controller")


@pytest.mark.parametrize("path", [
    "src/test/OrderTest.java",
    "scripts/build.ts",
    "src/controller/app.py",
    "README.md",
    "",
])
def test_unrecognized_paths(path):
    assert classify_path(path) == UNRECOGNIZED
    assert not classify_path(path).recognized


def test_file_extension():
    assert file_extension("a/b/C.Java") == ".java"
    assert file_extension("a\\b\\c.tsx") == ".tsx"
    assert file_extension("Makefile") == ""


# --- Import extractor ---

def test_java_imports_in_order():
    assert extract_imports(ORDER_CONTROLLER, JAVA) == [
        "com.app.domain.Order",
        "com.app.gateway.PaymentGateway",
        "com.app.application.OrderService",
        "java.util.List",
    ]


def test_java_static_and_wildcard_imports():
    content = "import static com.app.domain.Money.ZERO;\nimport com.app.infra.*;\n"
    assert extract_imports(content, JAVA) == ["com.app.domain.Money.ZERO", "com.app.infra.*"]


def test_duplicates_preserved():
    content = "import com.app.domain.Order;\nimport com.app.domain.Order;\n"
    assert extract_imports(content, JAVA) == ["com.app.domain.Order"] * 2


def test_lexical_match_sees_commented_imports():
    # best-effort: comments are not understood
    content = "// import com.app.domain.Order;\n"
    assert extract_imports(content, JAVA) == ["com.app.domain.Order"]


def test_swift_imports():
    content = "import Foundation\nimport NetworkKit\n@testable import AuthService\n"
    assert extract_imports(content, SWIFT) == ["Foundation", "NetworkKit", "AuthService"]


def test_es_import_forms():
    content = textwrap.dedent("""\
        import Vue from 'vue'
        import { ref, computed } from "vue"
        import * as api from '@/api/user'
        import request, { get } from '@/utils/request'
        import type { User } from '@/types/user'
        import './styles.css'
    """)
    assert extract_imports(content, VUE) == [
        "vue",
        "vue",
        "@/api/user",
        "@/utils/request",
        "@/types/user",
    ]


def test_no_imports():
    assert extract_imports("public class A {}", JAVA) == []


# --- Dependency-layer inferrer ---

@pytest.mark.parametrize("token,ruleset,expected", [
    ("com.app.domain.Order", JAVA, "Domain"),
    ("com.app.appservice.OrderApp", JAVA, "Application"),
    ("com.app.dao.OrderDao", JAVA, "Mapper"),
    ("java.util.List", JAVA, None),
    ("LoginViewModel", SWIFT, "ViewModel"),
    ("NetworkKit", SWIFT, "Network"),
    ("Foundation", SWIFT, None),
    ("@/composables/useUser", VUE, "Composable"),
    ("@/api/user", VUE, "API"),
    ("@/utils/request", VUE, "Request"),
    ("vue", VUE, None),
    ("../repository/user.repository", TS, "Repository"),
    ("../models/user", TS, "Model"),
])
def test_infer_import_layer(token, ruleset, expected):
    assert infer_import_layer(token, ruleset) == expected


# --- Violation detector ---

def test_controller_scenario():
    violations = check_architecture("src/controller/OrderController.java", ORDER_CONTROLLER)
    assert [v.dependency for v in violations] == [
        "com.app.domain.Order",
        "com.app.gateway.PaymentGateway",
    ]
    assert violations[0] == Violation(
        layer="Controller",
        dependency="com.app.domain.Order",
        dependency_layer="Domain",
        rule=JAVA.rule,
    )


def test_allowed_import_is_not_reported():
    violations = detect_violations("Controller", ["com.app.application.OrderService"], JAVA)
    assert violations == []


def test_self_layer_imports_allowed():
    imports = ["com.app.domain.Order", "com.app.entity.Customer"]
    assert detect_violations("Domain", imports, JAVA) == []


def test_unclassified_imports_ignored():
    assert detect_violations("Domain", ["java.util.List", "lombok.Data"], JAVA) == []


def test_unclassified_path_never_reports():
    assert check_architecture("src/test/OrderTest.java", ORDER_CONTROLLER) == []


def test_vue_view_violations():
    content = textwrap.dedent("""\
        <script setup lang="ts">
        import { useUser } from '@/composables/useUser'
        import { fetchUser } from '@/api/user'
        import request from '@/utils/request'
        </script>
    """)
    violations = check_architecture("src/views/Home.vue", content)
    assert [(v.dependency, v.dependency_layer) for v in violations] == [
        ("@/api/user", "API"),
        ("@/utils/request", "Request"),
    ]


def test_typescript_controller_violation():
    content = (
        "import { UserService } from '../service/user.service'\n"
        "import { UserRepository } from '../repository/user.repository'\n"
    )
    violations = check_architecture("src/controller/user.controller.ts", content)
    assert [(v.dependency_layer, v.layer) for v in violations] == [("Repository", "Controller")]


def test_swift_viewmodel_violation():
    content = "import Foundation\nimport AuthService\nimport NetworkKit\n"
    violations = check_architecture("App/ViewModels/LoginViewModel.swift", content)
    assert [v.dependency for v in violations] == ["NetworkKit"]


def test_check_is_idempotent():
    first = check_architecture("src/controller/OrderController.java", ORDER_CONTROLLER)
    second = check_architecture("src/controller/OrderController.java", ORDER_CONTROLLER)
    assert first == second


def test_custom_registry_is_used():
    registry = build_registry({
        "rulesets": {"java": {"allowed_dependencies": {"Controller": ["Application", "Domain", "Gateway"]}}},
    })
    assert check_architecture("src/controller/A.java", ORDER_CONTROLLER, registry) == []


# --- Message formatting ---

def test_format_message_contents():
    violations = check_architecture("src/controller/OrderController.java", ORDER_CONTROLLER)
    message = format_violation_message("src/controller/OrderController.java", violations)
    assert "src/controller/OrderController.java" in message
    assert "Layer: Controller" in message
    assert "com.app.domain.Order (Domain)" in message
    assert "com.app.gateway.PaymentGateway (Gateway)" in message
    assert JAVA.rule in message
    assert "Suggestion:" in message


def test_format_message_empty():
    assert format_violation_message("a.java", []) == ""
