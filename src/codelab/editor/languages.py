"""Fixed lexical tables and completion catalogs for the supported languages."""

from __future__ import annotations

from dataclasses import dataclass

from codelab.editor.types import Language

# ── Java ─────────────────────────────────────────────────────────────

JAVA_KEYWORDS = frozenset({
    "abstract", "assert", "boolean", "break", "byte", "case", "catch", "char", "class",
    "const", "continue", "default", "do", "double", "else", "enum", "extends", "final",
    "finally", "float", "for", "goto", "if", "implements", "import", "instanceof", "int",
    "interface", "long", "native", "new", "package", "private", "protected", "public",
    "return", "short", "static", "strictfp", "super", "switch", "synchronized", "this",
    "throw", "throws", "transient", "try", "void", "volatile", "while",
})

JAVA_TYPES = frozenset({
    "String", "Integer", "Double", "Float", "Long", "Boolean", "Character", "Byte", "Short",
})

JAVA_CONSTANTS = frozenset({"true", "false", "null"})

CLASS_TO_IMPORT: dict[str, str] = {
    "Scanner": "import java.util.Scanner;",
    "ArrayList": "import java.util.ArrayList;",
    "HashMap": "import java.util.HashMap;",
    "HashSet": "import java.util.HashSet;",
    "LinkedList": "import java.util.LinkedList;",
    "Queue": "import java.util.Queue;",
    "Stack": "import java.util.Stack;",
    "List": "import java.util.List;",
    "Map": "import java.util.Map;",
    "Set": "import java.util.Set;",
    "Date": "import java.util.Date;",
    "Random": "import java.util.Random;",
    "BigDecimal": "import java.math.BigDecimal;",
    "BigInteger": "import java.math.BigInteger;",
    "File": "import java.io.File;",
    "FileReader": "import java.io.FileReader;",
    "FileWriter": "import java.io.FileWriter;",
    "BufferedReader": "import java.io.BufferedReader;",
    "BufferedWriter": "import java.io.BufferedWriter;",
    "Gson": "import com.google.gson.Gson;",
    "ObjectMapper": "import com.fasterxml.jackson.databind.ObjectMapper;",
    "JsonProperty": "import com.fasterxml.jackson.annotation.JsonProperty;",
    "StringUtils": "import org.apache.commons.lang3.StringUtils;",
    "WordUtils": "import org.apache.commons.lang3.text.WordUtils;",
    "DescriptiveStatistics": "import org.apache.commons.math3.stat.descriptive.DescriptiveStatistics;",
    "FastMath": "import org.apache.commons.math3.util.FastMath;",
    "FileUtils": "import org.apache.commons.io.FileUtils;",
    "IOUtils": "import org.apache.commons.io.IOUtils;",
    "HttpStatus": "import org.apache.hc.core5.http.HttpStatus;",
    "Test": "import org.junit.jupiter.api.Test;",
    "Assertions": "import org.junit.jupiter.api.Assertions;",
    "Logger": "import org.slf4j.Logger;",
    "LoggerFactory": "import org.slf4j.LoggerFactory;",
}

JAVA_IMPORTS = [
    "import java.util.Scanner;",
    "import java.util.ArrayList;",
    "import java.util.HashMap;",
    "import java.util.HashSet;",
    "import java.util.List;",
    "import java.util.Map;",
    "import java.util.Set;",
    "import java.util.Queue;",
    "import java.util.Stack;",
    "import java.util.LinkedList;",
    "import java.util.Date;",
    "import java.util.Random;",
    "import java.io.*;",
    "import java.math.BigDecimal;",
    "import com.google.gson.Gson;",
    "import com.fasterxml.jackson.databind.ObjectMapper;",
    "import com.fasterxml.jackson.annotation.JsonProperty;",
    "import org.apache.commons.lang3.StringUtils;",
    "import org.apache.commons.lang3.text.WordUtils;",
    "import org.apache.commons.math3.stat.descriptive.DescriptiveStatistics;",
    "import org.apache.commons.math3.util.FastMath;",
    "import org.apache.commons.io.FileUtils;",
    "import org.apache.commons.io.IOUtils;",
    "import org.apache.hc.core5.http.HttpStatus;",
    "import org.junit.jupiter.api.Test;",
    "import org.junit.jupiter.api.Assertions;",
    "import org.slf4j.Logger;",
    "import org.slf4j.LoggerFactory;",
]

# Ordered like the completion popup lists them.
JAVA_KEYWORD_LIST = sorted(JAVA_KEYWORDS)


@dataclass(frozen=True)
class MethodEntry:
    """A completable method: ``name`` is matched, ``text`` is inserted."""

    name: str
    text: str
    description: str


JAVA_METHODS = [
    MethodEntry("println", "println()", "System.out.println();"),
    MethodEntry("print", "print()", "System.out.print();"),
    MethodEntry("nextLine", "nextLine()", "scanner.nextLine()"),
    MethodEntry("nextInt", "nextInt()", "scanner.nextInt()"),
    MethodEntry("nextDouble", "nextDouble()", "scanner.nextDouble()"),
    MethodEntry("next", "next()", "scanner.next()"),
    MethodEntry("close", "close()", "scanner.close()"),
    MethodEntry("length", "length()", ".length()"),
    MethodEntry("toString", "toString()", ".toString()"),
    MethodEntry("equals", "equals()", ".equals()"),
    MethodEntry("substring", "substring()", ".substring()"),
    MethodEntry("toUpperCase", "toUpperCase()", ".toUpperCase()"),
    MethodEntry("toLowerCase", "toLowerCase()", ".toLowerCase()"),
    MethodEntry("trim", "trim()", ".trim()"),
    MethodEntry("split", "split()", ".split()"),
    MethodEntry("contains", "contains()", ".contains()"),
    MethodEntry("add", "add()", ".add()"),
    MethodEntry("remove", "remove()", ".remove()"),
    MethodEntry("get", "get()", ".get()"),
    MethodEntry("put", "put()", ".put()"),
    MethodEntry("size", "size()", ".size()"),
]

# ── Python ───────────────────────────────────────────────────────────

PYTHON_KEYWORDS = frozenset({
    "False", "None", "True", "and", "as", "assert", "async", "await", "break", "class",
    "continue", "def", "del", "elif", "else", "except", "finally", "for", "from", "global",
    "if", "import", "in", "is", "lambda", "nonlocal", "not", "or", "pass", "raise",
    "return", "try", "while", "with", "yield",
})

PYTHON_BUILTIN_FUNCTIONS = frozenset({
    "abs", "all", "any", "ascii", "bin", "bool", "bytearray", "bytes", "callable", "chr",
    "classmethod", "compile", "complex", "delattr", "dict", "dir", "divmod", "enumerate",
    "eval", "exec", "filter", "float", "format", "frozenset", "getattr", "globals", "hasattr",
    "hash", "help", "hex", "id", "input", "int", "isinstance", "issubclass", "iter", "len",
    "list", "locals", "map", "max", "memoryview", "min", "next", "object", "oct", "open",
    "ord", "pow", "print", "property", "range", "repr", "reversed", "round", "set", "setattr",
    "slice", "sorted", "staticmethod", "str", "sum", "super", "tuple", "type", "vars", "zip",
})

PYTHON_TYPES = frozenset({"int", "float", "str", "list", "dict", "tuple", "set", "bool"})

PYTHON_IMPORTS = [
    "import numpy as np",
    "import pandas as pd",
    "import matplotlib.pyplot as plt",
    "import seaborn as sns",
    "import requests",
    "from bs4 import BeautifulSoup",
    "import json",
    "import csv",
    "import os",
    "import sys",
    "import math",
    "import random",
    "import datetime",
    "import re",
    "from collections import Counter",
    "from itertools import combinations",
    "from functools import reduce",
    "import scipy",
    "from sklearn import *",
    "from PIL import Image",
    "import openpyxl",
    "import pytz",
]

PYTHON_KEYWORD_LIST = sorted(PYTHON_KEYWORDS)

PYTHON_METHODS = [
    MethodEntry("print", "print()", "print()"),
    MethodEntry("input", "input()", "input()"),
    MethodEntry("len", "len()", "len()"),
    MethodEntry("range", "range()", "range()"),
    MethodEntry("enumerate", "enumerate()", "enumerate()"),
    MethodEntry("append", "append()", ".append()"),
    MethodEntry("extend", "extend()", ".extend()"),
    MethodEntry("insert", "insert()", ".insert()"),
    MethodEntry("remove", "remove()", ".remove()"),
    MethodEntry("pop", "pop()", ".pop()"),
    MethodEntry("sort", "sort()", ".sort()"),
    MethodEntry("reverse", "reverse()", ".reverse()"),
    MethodEntry("split", "split()", ".split()"),
    MethodEntry("join", "join()", ".join()"),
    MethodEntry("strip", "strip()", ".strip()"),
    MethodEntry("lower", "lower()", ".lower()"),
    MethodEntry("upper", "upper()", ".upper()"),
    MethodEntry("replace", "replace()", ".replace()"),
    MethodEntry("startswith", "startswith()", ".startswith()"),
    MethodEntry("endswith", "endswith()", ".endswith()"),
    MethodEntry("format", "format()", ".format()"),
    MethodEntry("keys", "keys()", ".keys()"),
    MethodEntry("values", "values()", ".values()"),
    MethodEntry("items", "items()", ".items()"),
    MethodEntry("get", "get()", ".get()"),
    MethodEntry("update", "update()", ".update()"),
    MethodEntry("open", "open()", "open()"),
    MethodEntry("read", "read()", "read()"),
    MethodEntry("write", "write()", "write()"),
    MethodEntry("close", "close()", "close()"),
]

# ── Per-language lookups ─────────────────────────────────────────────

LINE_COMMENT: dict[Language, str] = {"java": "//", "python": "#"}

IMPORT_KEYWORDS: dict[Language, tuple[str, ...]] = {
    "java": ("import",),
    "python": ("import", "from"),
}

DEFAULT_TEMPLATES: dict[Language, str] = {
    "python": (
        "# Python Code\n"
        "def greet(name):\n"
        '    return f"Hello, {name}!"\n'
        "\n"
        "print(greet('World'))"
    ),
    "java": (
        "// Java Code\n"
        "public class Main {\n"
        "    public static void main(String[] args) {\n"
        '        System.out.println(greet("World"));\n'
        "    }\n"
        "    \n"
        "    public static String greet(String name) {\n"
        '        return "Hello, " + name + "!";\n'
        "    }\n"
        "}"
    ),
}


def keywords_for(language: Language) -> frozenset[str]:
    return JAVA_KEYWORDS if language == "java" else PYTHON_KEYWORDS


def keyword_list_for(language: Language) -> list[str]:
    return JAVA_KEYWORD_LIST if language == "java" else PYTHON_KEYWORD_LIST


def methods_for(language: Language) -> list[MethodEntry]:
    return JAVA_METHODS if language == "java" else PYTHON_METHODS


def imports_for(language: Language) -> list[str]:
    return JAVA_IMPORTS if language == "java" else PYTHON_IMPORTS
