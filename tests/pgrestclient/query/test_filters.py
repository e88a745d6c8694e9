"""Prove that horizontal filtering and logical operators are written correctly."""

from decimal import Decimal

import pytest

from pgrestclient.query import Query, format_value, sanitize_value

SIMPLE_OPERATORS = ["eq", "gt", "gte", "lt", "lte", "neq", "like", "ilike"]


class TestFilters:
    @pytest.mark.parametrize("method", SIMPLE_OPERATORS)
    def test_simple_operator(self, query, method):
        assert getattr(query, method)("id", 1).to_string() == f"id={method}.1"
        assert getattr(query, method)("col1", "test").to_string() == f"col1={method}.test"

        q = getattr(getattr(query, method)("id", 1), method)("col1", "test")
        assert q.to_string() == f"id={method}.1&col1={method}.test"
        assert q.to_object()[method] == [["id", 1, False], ["col1", "test", False]]

    def test_in(self, query):
        q = query.in_("col1", ["val1", "val2"])
        assert q.to_string() == "col1=in.%28val1%2Cval2%29"
        assert q.to_string(encoded=False) == "col1=in.(val1,val2)"
        assert q.to_object()["in"] == [["col1", ["val1", "val2"], False]]

        q2 = q.in_("id", (1, 2))
        assert q2.to_string() == "col1=in.%28val1%2Cval2%29&id=in.%281%2C2%29"
        assert q2.to_string(encoded=False) == "col1=in.(val1,val2)&id=in.(1,2)"

    def test_in_requires_list(self, query):
        with pytest.raises(TypeError):
            query.in_("col1", "val1")

    def test_in_quotes_special_values(self, query):
        q = query.in_("col1", ["a,b", "c", 'say"hi"'])
        assert q.to_string(encoded=False) == 'col1=in.("a,b",c,"say\\"hi\\"")'

    def test_is(self, query):
        assert query.is_("col1", None).to_string() == "col1=is.null"
        assert query.is_("col1", True).to_string() == "col1=is.true"
        assert query.is_("col1", False).to_string() == "col1=is.false"
        assert query.is_("json_column->val", None).to_string(encoded=False) == (
            "json_column->val=is.null"
        )

    def test_multiple_filters(self, query):
        q = query.gt("id", 5).lt("id", 15).in_("col1", ["val1", "val2"])
        assert q.to_string() == "id=gt.5&id=lt.15&col1=in.%28val1%2Cval2%29"
        assert q.to_string(encoded=False) == "id=gt.5&id=lt.15&col1=in.(val1,val2)"

    def test_filter_combination(self, query):
        assert query.eq("col1", "test").gte("id", 5).to_string() == "col1=eq.test&id=gte.5"
        assert (
            query.gt("id", 5).lte("id", 15).neq("col1", "test").to_string()
            == "id=gt.5&id=lte.15&col1=neq.test"
        )

    def test_grouped_by_operator(self, query):
        """Filters are written per operator, not in the order they were added."""
        q = (
            query.gt("id", 5)
            .lt("id", 15)
            .gt("json_column->num_val", 1)
            .gt("json_column->>num_val", "1")
            .in_("json_column->val1", ["val1", "val2"])
        )
        assert q.to_string(encoded=False) == (
            "id=gt.5&json_column->num_val=gt.1&json_column->>num_val=gt.1"
            "&id=lt.15&json_column->val1=in.(val1,val2)"
        )

    @pytest.mark.parametrize("method", SIMPLE_OPERATORS)
    def test_json_columns(self, query, method):
        q = getattr(query, method)
        assert q("json_column->val", 1).to_string(encoded=False) == f"json_column->val={method}.1"
        assert q("json_column->>val", "1").to_string(encoded=False) == (
            f"json_column->>val={method}.1"
        )
        assert q("json_column2->VAL", 1).to_string(encoded=False) == f"json_column2->VAL={method}.1"

    def test_value_types(self, query):
        q = query.eq("a", Decimal("1.50")).eq("b", 2.5).eq("c", True)
        assert q.to_string() == "a=eq.1.50&b=eq.2.5&c=eq.true"

    def test_like_wildcard(self, query):
        assert query.like("col1", "*test*").to_string() == "col1=like.*test*"
        assert query.ilike("col1", "te st*").to_string() == "col1=ilike.te+st*"


class TestEncoding:
    def test_whitespace(self, query):
        q = query.eq("col1", "test test")
        assert q.to_string() == "col1=eq.test+test"
        assert q.to_string(encoded=False) == "col1=eq.test+test"

    def test_plus_sign(self, query):
        q = query.eq("col1", "test+test")
        assert q.to_string() == "col1=eq.test%2Btest"
        assert q.to_string(encoded=False) == "col1=eq.test+test"

    def test_unicode(self, query):
        q1 = query.eq("col1", "Günter")
        assert q1.to_string() == "col1=eq.G%C3%BCnter"
        assert q1.to_string(encoded=False) == "col1=eq.Günter"

        q2 = query.eq("col1", "👌🏻")
        assert q2.to_string() == "col1=eq.%F0%9F%91%8C%F0%9F%8F%BB"
        assert q2.to_string(encoded=False) == "col1=eq.👌🏻"

    def test_default_from_settings(self, query, settings):
        q = query.in_("id", [1, 2])
        assert str(q) == "id=in.%281%2C2%29"

        settings.PGRESTCLIENT_ENCODE_QUERY_STRINGS = False
        assert str(q) == "id=in.(1,2)"
        assert q.to_string(encoded=True) == "id=in.%281%2C2%29"


class TestLogicalOperators:
    def test_and(self, query):
        q = query.and_([query.gt("id", 1), query.eq("col1", "test")])
        assert q.to_string(encoded=False) == "and=(id.gt.1,col1.eq.test)"
        assert q.to_string() == "and=%28id.gt.1%2Ccol1.eq.test%29"

    def test_or(self, query):
        q = query.or_([query.gt("id", 1), query.eq("col1", "test")])
        assert q.to_string(encoded=False) == "or=(id.gt.1,col1.eq.test)"
        assert q.to_string() == "or=%28id.gt.1%2Ccol1.eq.test%29"

    def test_nested(self, query):
        q = query.or_(lambda q: [q.eq("id", 1), q.and_([q.gte("id", 11), q.lte("id", 17)])])
        assert q.to_string(encoded=False) == "or=(id.eq.1,and(id.gte.11,id.lte.17))"
        assert q.to_string() == "or=%28id.eq.1%2Cand%28id.gte.11%2Cid.lte.17%29%29"

    def test_deeply_nested(self, query):
        q = query.and_(
            lambda q: [
                q.or_(lambda q2: [q2.eq("a", 1), q2.and_([q2.eq("b", 2), q2.eq("c", 3)])]),
                q.eq("d", 4),
            ]
        )
        assert q.to_string(encoded=False) == "and=(or(a.eq.1,and(b.eq.2,c.eq.3)),d.eq.4)"

    def test_and_groups_first(self, query):
        q = query.or_([query.eq("id", 1)]).and_([query.eq("id", 2)])
        assert q.to_string(encoded=False) == "and=(id.eq.2)&or=(id.eq.1)"

    def test_child_with_multiple_filters(self, query):
        q = query.or_([query.eq("id", 1).eq("col1", "a"), query.gt("id", 5)])
        assert q.to_string(encoded=False) == "or=(id.eq.1,col1.eq.a,id.gt.5)"

    def test_quoted_values(self, query):
        """Values inside a group are quoted when they contain reserved characters."""
        q = query.or_([query.eq("col1", "a,b"), query.eq("col1", "x.y"), query.in_("id", [1, 2])])
        assert q.to_string(encoded=False) == 'or=(col1.eq."a,b",col1.eq."x.y",id.in.(1,2))'

    def test_children_selectors_ignored(self, query):
        q = query.or_([query.select("id").eq("id", 1)])
        assert q.to_string(encoded=False) == "or=(id.eq.1)"

    def test_list_and_function_are_equal(self, query):
        assert query.and_([query.gt("id", 1), query.eq("col1", "test")]) == query.and_(
            lambda q: [q.gt("id", 1), q.eq("col1", "test")]
        )
        assert query.or_([query.gt("id", 1), query.eq("col1", "test")]) == query.or_(
            lambda q: [q.gt("id", 1), q.eq("col1", "test")]
        )

    def test_invalid_children(self, query):
        with pytest.raises(TypeError):
            query.or_(["id.eq.1"])

    def test_to_object(self, query):
        q = query.or_([query.eq("id", 1)])
        ((children, negated),) = q.to_object()["or"]
        assert negated is False
        assert children[0]["eq"] == [["id", 1, False]]


class TestNot:
    def test_simple(self, query):
        assert query.not_.eq("id", 1).lt("id", 5).to_string(encoded=False) == (
            "id=not.eq.1&id=lt.5"
        )

    def test_in(self, query):
        q = query.not_.in_("id", [1, 2, 3])
        assert q.to_string(encoded=False) == "id=not.in.(1,2,3)"
        assert q.to_object()["in"] == [["id", [1, 2, 3], True]]

    def test_is(self, query):
        assert query.not_.is_("col1", None).to_string() == "col1=not.is.null"

    def test_logical_operator(self, query):
        q = query.or_(lambda q: [q.eq("id", 7), q.not_.or_([q.eq("id", 1), q.gte("id", 5)])])
        assert q.to_string(encoded=False) == "or=(id.eq.7,not.or(id.eq.1,id.gte.5))"

    def test_combined_logical(self, query):
        q = query.not_.or_([query.eq("id", 1), query.eq("id", 2)]).or_(
            [query.lt("id", 5), query.gt("id", 10)]
        )
        assert q.to_string(encoded=False) == "not.or=(id.eq.1,id.eq.2)&or=(id.lt.5,id.gt.10)"
        assert [negated for _, negated in q.to_object()["or"]] == [True, False]

    def test_negated_filters_inside_group(self, query):
        q = query.and_(lambda q: [q.not_.eq("id", 1), q.not_.in_("id", [2, 5])])
        assert q.to_string(encoded=False) == "and=(id.not.eq.1,id.not.in.(2,5))"

    def test_only_next_filter(self, query):
        """Negation applies to a single call, and doesn't affect the original query."""
        negated = query.not_
        q1 = negated.eq("id", 1)
        q2 = negated.eq("id", 2).eq("id", 3)
        assert q1.to_string() == "id=not.eq.1"
        assert q2.to_string() == "id=not.eq.2&id=eq.3"
        assert query.eq("id", 1).to_string() == "id=eq.1"

    def test_returns_query(self, query):
        assert isinstance(query.not_.eq("id", 1), Query)


class TestValueFormatting:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, "null"),
            (True, "true"),
            (False, "false"),
            (0, "0"),
            (1.5, "1.5"),
            ("text", "text"),
        ],
    )
    def test_format_value(self, value, expected):
        assert format_value(value) == expected

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("plain", "plain"),
            ("a,b", '"a,b"'),
            ("a.b", '"a.b"'),
            ("a:b", '"a:b"'),
            ("(a)", '"(a)"'),
            ("a b", '"a b"'),
            ('a"b', '"a\\"b"'),
            (1.5, '"1.5"'),
        ],
    )
    def test_sanitize_value(self, value, expected):
        assert sanitize_value(value) == expected
